"""Running-balance properties checked over many generated ledgers.

Each seed builds a sequence of credit/debit pairs that mixes plain amounts,
zero amounts and entries with no amount at all. The checks compare what the
mutation API produces with a ledger built from scratch without (or with a
replaced) entry, for every position in the sequence.
"""

import random
from decimal import Decimal

import pytest

from company_ledger.balance import recompute
from tests.helpers.ledger import balances, draft, make_ledger

SEEDS = range(30)

type Amounts = tuple[str | None, str | None]


def _random_amount(rng: random.Random) -> str:
    return str(Decimal(rng.randint(1, 500_000)) / 100)


def _random_pair(rng: random.Random) -> Amounts:
    kind = rng.choice(("credit", "debit", "zero_credit", "zero_debit", "none"))
    if kind == "credit":
        return _random_amount(rng), None
    if kind == "debit":
        return None, _random_amount(rng)
    if kind == "zero_credit":
        return "0", None
    if kind == "zero_debit":
        return None, "0"
    return None, None


def _sequence(seed: int) -> list[Amounts]:
    rng = random.Random(seed)
    return [_random_pair(rng) for _ in range(rng.randint(1, 12))]


def _build(pairs: list[Amounts]):
    ledger = make_ledger()
    for i, (credit, debit) in enumerate(pairs):
        ledger.add(draft(particular=f"row {i}", credit=credit, debit=debit))
    return ledger


def _value(raw: str | None) -> Decimal:
    return Decimal(raw) if raw else Decimal(0)


@pytest.mark.parametrize("seed", SEEDS)
def test_balances_are_prefix_sums_after_every_add(seed: int):
    pairs = _sequence(seed)
    ledger = make_ledger()
    running = Decimal(0)
    for i, (credit, debit) in enumerate(pairs):
        ledger.add(draft(credit=credit, debit=debit))
        running += _value(credit) - _value(debit)
        assert len(ledger.entries) == i + 1
        assert ledger.entries[-1].balance == running
    expected = []
    total = Decimal(0)
    for credit, debit in pairs:
        total += _value(credit) - _value(debit)
        expected.append(total)
    assert balances(ledger.entries) == expected


@pytest.mark.parametrize("seed", SEEDS)
def test_delete_any_position_matches_ledger_without_it(seed: int):
    pairs = _sequence(seed)
    for k in range(len(pairs)):
        ledger = _build(pairs)
        before = ledger.entries
        assert ledger.delete(before[k].id)

        after = ledger.entries
        assert [e.id for e in after] == [e.id for e in before[:k] + before[k + 1 :]]
        assert balances(after[:k]) == balances(before[:k])
        assert balances(after) == balances(recompute(before[:k] + before[k + 1 :]))
        assert balances(after) == balances(_build(pairs[:k] + pairs[k + 1 :]).entries)


@pytest.mark.parametrize("seed", SEEDS)
def test_edit_any_position_keeps_order_and_matches_rebuilt_ledger(seed: int):
    pairs = _sequence(seed)
    rng = random.Random(seed + 10_000)
    for k in range(len(pairs)):
        replacement = _random_pair(rng)
        ledger = _build(pairs)
        before = ledger.entries
        credit, debit = replacement
        edited = ledger.edit(before[k].id, draft(particular=f"row {k}", credit=credit, debit=debit))
        assert edited is not None

        after = ledger.entries
        assert [e.id for e in after] == [e.id for e in before]
        assert balances(after[:k]) == balances(before[:k])
        rebuilt = _build(pairs[:k] + [replacement] + pairs[k + 1 :])
        assert balances(after) == balances(rebuilt.entries)
