import datetime as dt
from decimal import Decimal

import pytest

from company_ledger.errors import EntryValidationError
from company_ledger.ledger import parse_input_amount, validate_draft
from company_ledger.models import Composing, Editing, EntryDraft
from company_ledger.storage import MemoryStorage
from company_ledger.store import decode_entries
from tests.helpers.ledger import FIXED_DAY, StepClock, balances, draft, make_ledger


def _seed(ledger):
    a = ledger.add(draft(credit="100"))
    b = ledger.add(draft(debit="40", category="Rent"))
    c = ledger.add(draft(credit="10", category="Others"))
    return a, b, c


# ---- add ---------------------------------------------------------------------


def test_add_appends_and_returns_entry_with_balance():
    ledger = make_ledger()
    a, b, c = _seed(ledger)
    assert [e.id for e in ledger.entries] == [a.id, b.id, c.id]
    assert balances(ledger.entries) == [Decimal("100"), Decimal("60"), Decimal("70")]
    assert c.balance == Decimal("70")


def test_add_persists_full_snapshot():
    storage = MemoryStorage()
    ledger = make_ledger(storage)
    _seed(ledger)
    stored = decode_entries(storage.data["ledgerEntries"])
    assert [e.id for e in stored] == [e.id for e in ledger.entries]


def test_add_assigns_strictly_increasing_ids_even_when_clock_stalls():
    ledger = make_ledger(clock=StepClock(step=0))
    ids = [ledger.add(draft(credit="1")).id for _ in range(3)]
    assert ids == sorted(set(ids))
    assert len(set(ids)) == 3


def test_add_normalizes_company_whitespace():
    ledger = make_ledger()
    e = ledger.add(draft("  Acme   Traders ", credit="1"))
    assert e.company_name == "Acme Traders"


@pytest.mark.parametrize(
    ("kwargs", "field"),
    [
        ({"company": "   ", "credit": "1"}, "companyName"),
        ({"category": "", "credit": "1"}, "category"),
        ({"category": "Travel", "credit": "1"}, "category"),
        ({"credit": "abc"}, "credit"),
        ({"debit": "-5"}, "debit"),
        ({"credit": "10", "debit": "5"}, "debit"),
    ],
)
def test_add_rejects_invalid_drafts_and_leaves_ledger_untouched(kwargs, field):
    ledger = make_ledger()
    ledger.add(draft(credit="100"))
    version = ledger.store.version
    with pytest.raises(EntryValidationError) as exc:
        ledger.add(draft(**kwargs))
    assert exc.value.field == field
    assert len(ledger.entries) == 1
    assert ledger.store.version == version


def test_zero_amount_counts_as_set():
    with pytest.raises(EntryValidationError):
        validate_draft(draft(credit="0", debit="5"))
    fields = validate_draft(draft(credit="0"))
    assert fields.credit == Decimal(0)
    assert fields.debit is None


def test_entry_with_no_amount_is_accepted_and_contributes_nothing():
    ledger = make_ledger()
    ledger.add(draft(credit="50"))
    e = ledger.add(draft(particular="memo only"))
    assert e.credit is None and e.debit is None
    assert e.balance == Decimal("50")


def test_datetime_draft_date_is_truncated_to_date():
    fields = validate_draft(draft(credit="1", date=dt.datetime(2024, 1, 2, 13, 45)))
    assert fields.date == dt.date(2024, 1, 2)


def test_parse_input_amount():
    assert parse_input_amount("credit", "  ") is None
    assert parse_input_amount("credit", None) is None
    assert parse_input_amount("credit", " 12.50 ") == Decimal("12.50")
    with pytest.raises(EntryValidationError):
        parse_input_amount("credit", "NaN")
    with pytest.raises(EntryValidationError):
        parse_input_amount("debit", "Infinity")


# ---- edit --------------------------------------------------------------------


def test_edit_updates_in_place_and_recomputes_later_balances():
    ledger = make_ledger()
    a, b, c = _seed(ledger)
    updated = ledger.edit(b.id, draft(debit="30", category="Rent", particular="April rent"))
    assert updated is not None
    assert [e.id for e in ledger.entries] == [a.id, b.id, c.id]
    assert balances(ledger.entries) == [Decimal("100"), Decimal("70"), Decimal("80")]
    assert ledger.get(b.id).particular == "April rent"


def test_edit_switching_debit_to_credit():
    ledger = make_ledger()
    a, b, c = _seed(ledger)
    ledger.edit(b.id, draft(credit="40", category="Rent"))
    assert balances(ledger.entries) == [Decimal("100"), Decimal("140"), Decimal("150")]


def test_edit_missing_id_is_noop():
    ledger = make_ledger()
    _seed(ledger)
    version = ledger.store.version
    assert ledger.edit(12345, draft(credit="1")) is None
    assert ledger.store.version == version


def test_edit_validates_before_lookup():
    ledger = make_ledger()
    with pytest.raises(EntryValidationError):
        ledger.edit(12345, draft(credit="1", debit="1"))


# ---- delete ------------------------------------------------------------------


def test_delete_middle_entry_recomputes():
    ledger = make_ledger()
    a, b, c = _seed(ledger)
    assert ledger.delete(b.id) is True
    assert [e.id for e in ledger.entries] == [a.id, c.id]
    assert balances(ledger.entries) == [Decimal("100"), Decimal("110")]


def test_delete_missing_id_is_noop():
    storage = MemoryStorage()
    ledger = make_ledger(storage)
    _seed(ledger)
    before = storage.data["ledgerEntries"]
    assert ledger.delete(999) is False
    assert storage.data["ledgerEntries"] == before


def test_delete_last_entry_leaves_empty_ledger():
    ledger = make_ledger()
    e = ledger.add(draft(credit="1"))
    ledger.delete(e.id)
    assert ledger.entries == ()


# ---- draft states ------------------------------------------------------------


def test_new_draft_defaults_to_today():
    ledger = make_ledger()
    state = ledger.new_draft()
    assert isinstance(state, Composing)
    assert state.draft == EntryDraft(date=FIXED_DAY)


def test_save_composing_adds_and_resets():
    ledger = make_ledger()
    nxt = ledger.save(Composing(draft(credit="25")))
    assert isinstance(nxt, Composing)
    assert nxt.draft.company_name == ""
    assert balances(ledger.entries) == [Decimal("25")]


def test_begin_edit_and_save_editing_updates_target():
    ledger = make_ledger()
    a, b, c = _seed(ledger)
    state = ledger.begin_edit(a.id)
    assert isinstance(state, Editing)
    assert state.target_id == a.id
    assert state.draft.credit == Decimal("100")

    nxt = ledger.save(Editing(state.target_id, draft(credit="200")))
    assert isinstance(nxt, Composing)
    assert len(ledger.entries) == 3
    assert balances(ledger.entries) == [Decimal("200"), Decimal("160"), Decimal("170")]


def test_begin_edit_missing_id_returns_none():
    assert make_ledger().begin_edit(1) is None


def test_save_editing_deleted_target_is_noop():
    ledger = make_ledger()
    a, _, _ = _seed(ledger)
    state = ledger.begin_edit(a.id)
    ledger.delete(a.id)
    ledger.save(state)
    assert a.id not in [e.id for e in ledger.entries]
    assert len(ledger.entries) == 2


def test_save_invalid_draft_raises_and_keeps_state():
    ledger = make_ledger()
    with pytest.raises(EntryValidationError):
        ledger.save(Composing(draft(credit="1", debit="2")))
    assert ledger.entries == ()


def test_save_rejects_unknown_state():
    with pytest.raises(TypeError):
        make_ledger().save(object())


@pytest.mark.parametrize("raw", ["1e15", "1000000000000000", "1e30"])
def test_parse_input_amount_rejects_oversized_values(raw):
    with pytest.raises(EntryValidationError) as exc:
        parse_input_amount("credit", raw)
    assert exc.value.field == "credit"


def test_parse_input_amount_accepts_largest_allowed_value():
    assert parse_input_amount("debit", "999999999999999.99") == Decimal("999999999999999.99")
    # A zero written with a large exponent is still zero
    assert parse_input_amount("debit", "0E+20") == Decimal(0)


def test_add_oversized_amount_leaves_ledger_untouched():
    ledger = make_ledger()
    with pytest.raises(EntryValidationError):
        ledger.add(draft(credit="1e30"))
    assert ledger.entries == ()
