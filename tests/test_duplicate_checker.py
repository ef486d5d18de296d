from segmentor.core.models import CustomerRecord
from segmentor.core.processing.duplicate_checker import (
    DuplicateCheckService,
    check_for_duplicate,
    detect_batch_duplicates,
)


def _record(record_id: str, **fields) -> CustomerRecord:
    return CustomerRecord(id=record_id, satisfaction=3, loyalty=3, **fields)


def test_historical_re_entry_is_not_a_duplicate() -> None:
    existing = [_record("1", email="a@x.com", date="2024-01-01")]
    candidate = _record("2", email="a@x.com", date="2024-02-01")
    result = check_for_duplicate(candidate, existing)
    assert result.is_duplicate is False
    assert result.reason is None


def test_same_email_without_dates_is_a_duplicate() -> None:
    existing = [_record("1", email="a@x.com")]
    result = check_for_duplicate(_record("2", email=" A@X.com "), existing)
    assert result.is_duplicate is True
    assert result.reason == "email"
    assert result.matched_record is existing[0]


def test_same_name_without_emails_is_a_duplicate() -> None:
    existing = [_record("1", name="Jo", email="")]
    result = check_for_duplicate(_record("2", name="Jo", email=""), existing)
    assert result.is_duplicate is True
    assert result.reason == "name"


def test_name_is_ignored_once_an_email_is_present() -> None:
    assert check_for_duplicate(
        _record("2", name="Jo", email="jo@x.com"), [_record("1", name="Jo", email="other@x.com")]
    ).is_duplicate is False
    assert check_for_duplicate(
        _record("2", name="Jo", email="jo@x.com"), [_record("1", name="Jo")]
    ).is_duplicate is False


def test_matching_dates_are_named_in_the_reason() -> None:
    existing = [_record("7", date="01/03/2024")]
    result = check_for_duplicate(_record("7", date=" 01/03/2024"), existing)
    assert result.is_duplicate is True
    assert result.reason == "id and date"

    existing = [_record("1", email="a@x.com", date="2024-01-01")]
    result = check_for_duplicate(_record("2", email="a@x.com", date="2024-01-01"), existing)
    assert result.reason == "email and date"


def test_one_missing_date_falls_back_to_identity() -> None:
    existing = [_record("1", email="a@x.com", date="2024-01-01")]
    result = check_for_duplicate(_record("2", email="a@x.com"), existing)
    assert result.is_duplicate is True
    assert result.reason == "email"


def test_self_edit_is_never_its_own_duplicate() -> None:
    record = _record("5", email="me@x.com")
    dataset = [record]
    assert DuplicateCheckService.check_for_duplicate(record, dataset).is_duplicate is True
    assert DuplicateCheckService.check_for_duplicate(record, dataset, excluded_id="5").is_duplicate is False


def test_check_is_idempotent_and_first_match_wins() -> None:
    existing = [
        _record("1", email="a@x.com"),
        _record("2", email="a@x.com"),
    ]
    candidate = _record("3", email="a@x.com")
    first = check_for_duplicate(candidate, existing)
    second = check_for_duplicate(candidate, existing)
    assert first == second
    assert first.matched_record.id == "1"


def test_different_customers_do_not_match() -> None:
    existing = [_record("1", name="Ann", email="ann@x.com")]
    assert check_for_duplicate(_record("2", name="Bob", email="bob@x.com"), existing).is_duplicate is False


def test_batch_report_flags_file_and_dataset_duplicates() -> None:
    existing = [_record("1", email="a@x.com", date="2024-01-01")]
    rows = [
        _record("10", email="a@x.com", date="2024-01-01"),
        _record("11", email="b@x.com", date="2024-01-01"),
        _record("12", email="b@x.com", date="2024-01-01"),
        _record("13", email="a@x.com", date="2024-06-01"),
    ]
    report = detect_batch_duplicates(rows, existing)

    assert [item.id for item in report.items] == ["10", "11", "12"]
    assert report.items[0].reason == "Matches existing record 1 on email and date"
    assert report.items[1].reason == "Duplicate within imported file on email and date"

    frame = report.to_dataframe()
    assert list(frame.columns) == ["ID", "Name", "Email", "Reason"]
    assert frame.loc[0, "Name"] == "Unnamed"
