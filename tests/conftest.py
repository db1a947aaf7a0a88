# tests/conftest.py
"""
Shared Sway sources and helpers for the test-suite.

Sources start on line 1 (no leading newline) so that line numbers in
findings can be asserted directly.
"""

from typing import Optional

import pytest

from sway_analyzer.config import AnalyzerConfig
from sway_analyzer.project import Project


UNPROTECTED_OWNER_SW = """\
contract;

abi Owned {
    #[storage(write)]
    fn set_owner(owner: Identity);
}

storage {
    owner: Option<Identity> = None,
}

impl Owned for Contract {
    #[storage(write)]
    fn set_owner(owner: Identity) {
        storage.owner.write(Some(owner));
    }
}
"""

PROTECTED_OWNER_SW = """\
contract;

abi Owned {
    #[storage(read, write)]
    fn set_owner(owner: Identity);
}

storage {
    owner: Option<Identity> = None,
}

impl Owned for Contract {
    #[storage(read, write)]
    fn set_owner(owner: Identity) {
        require(msg_sender().unwrap() == storage.owner.read().unwrap(), "not owner");
        storage.owner.write(Some(owner));
    }
}
"""

COUNTER_SW = """\
contract;

abi Counter {
    #[storage(read, write)]
    fn increment();
}

storage {
    count: u64 = 0,
}

fn bump() {
    storage.count.write(storage.count.read() + 1);
}

impl Counter for Contract {
    #[storage(read, write)]
    fn increment() {
        bump();
    }
}
"""

ONLY_OWNER_HELPER_SW = """\
contract;

storage {
    owner: Option<Identity> = None,
}

fn only_owner() {
    require(msg_sender().unwrap() == storage.owner.read().unwrap(), "not owner");
}

impl Owned for Contract {
    #[storage(read, write)]
    fn set_owner(owner: Identity) {
        only_owner();
        storage.owner.write(Some(owner));
    }
}
"""

INLINE_ASM_SW = """\
contract;

fn raw(x: u64) -> u64 {
    asm(r1: x, r2) {
        add r2 r1 one;
        r2: u64
    }
}

impl Hasher for Contract {
    fn hash(x: u64) -> b256 {
        let result = asm(r1: x) {
            r1: b256
        };
        result
    }
}
"""

KITCHEN_SINK_SW = """\
contract;

// A module exercising most of the grammar.
use std::{auth::msg_sender, hash::sha256};
use std::storage::storage_map::*;

/* configuration */
configurable {
    FEE: u64 = 5,
}

const LIMIT: u64 = 100;

struct Point {
    x: u64,
    y: u64,
}

enum State {
    Open: (),
    Closed: u64,
}

storage {
    balances: StorageMap<Identity, u64> = StorageMap {},
    state: State = State::Open,
}

abi Wallet {
    #[storage(read)]
    fn balance(who: Identity) -> u64;
}

impl Wallet for Contract {
    #[storage(read)]
    fn balance(who: Identity) -> u64 {
        let p = Point { x: 1, y: 2 };
        let (a, _) = (p.x, p.y);
        let mut total = 0;
        let mut i = 0;
        while i < LIMIT {
            total += a * 2 + i;
            i = i + 1;
        }
        if let Some(v) = storage.balances.get(who).try_read() {
            total = total + v;
        } else if total > FEE {
            total -= FEE;
        } else {
            return 0;
        }
        match storage.state.read() {
            State::Open => total,
            State::Closed(code) => code,
        }
    }
}
"""


def run_analysis(source: str, path: str = "src/main.sw",
                 config: Optional[AnalyzerConfig] = None) -> Project:
    """Analyse a single in-memory source and return the project."""
    project = Project(config)
    project.add_source(path, source)
    project.analyze()
    return project


def messages(project: Project):
    return [entry.message for entry in project.report.entries]


@pytest.fixture
def write_source(tmp_path):
    """Write a Sway source below ``tmp_path`` and return its path."""

    def _write(name: str, text: str):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
