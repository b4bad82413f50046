import pytest

from secure_finance.crud import crud_entry_label, crud_label
from secure_finance.db.core import EntryLabelDB, ConflictError, NotFoundError
from secure_finance.models.label import LabelCreate

from conftest import b64
from test_stores import new_category, new_subcategory, new_entry


@pytest.fixture
def tagged(db_session, make_user):
    _, principal = make_user("a", b"p1")
    category = new_category(db_session, principal)
    subcategory = new_subcategory(db_session, principal, category.id)
    entry = new_entry(db_session, principal, subcategory.id)
    label = crud_label.create_db_label(db_session, principal, LabelCreate(name=b64(b"work"), colour_id=1))
    return principal, entry.id, label.id


def test_link_and_list_both_directions(db_session, tagged) -> None:
    principal, entry_id, label_id = tagged

    link = crud_entry_label.add_label_to_entry(db_session, principal, entry_id, label_id)
    assert (link.entry_id, link.label_id, link.user_id) == (entry_id, label_id, principal.user_id)

    labels = crud_entry_label.read_db_labels_for_entry(db_session, principal, entry_id)
    assert [label.id for label in labels] == [label_id]

    entries = crud_entry_label.read_db_entries_for_label(db_session, principal, label_id)
    assert [entry.id for entry in entries] == [entry_id]


def test_duplicate_link_is_rejected(db_session, tagged) -> None:
    principal, entry_id, label_id = tagged
    crud_entry_label.add_label_to_entry(db_session, principal, entry_id, label_id)

    with pytest.raises(ConflictError):
        crud_entry_label.add_label_to_entry(db_session, principal, entry_id, label_id)

    assert db_session.query(EntryLabelDB).count() == 1


def test_unlink(db_session, tagged) -> None:
    principal, entry_id, label_id = tagged
    crud_entry_label.add_label_to_entry(db_session, principal, entry_id, label_id)

    assert crud_entry_label.remove_label_from_entry(db_session, principal, entry_id, label_id) == 1
    assert crud_entry_label.read_db_labels_for_entry(db_session, principal, entry_id) == []

    with pytest.raises(NotFoundError):
        crud_entry_label.remove_label_from_entry(db_session, principal, entry_id, label_id)


def test_cannot_link_another_users_label(db_session, make_user, tagged) -> None:
    principal, entry_id, _ = tagged
    _, other = make_user("b", b"p2")
    foreign_label = crud_label.create_db_label(db_session, other, LabelCreate(name=b64(b"x"), colour_id=1))

    with pytest.raises(NotFoundError):
        crud_entry_label.add_label_to_entry(db_session, principal, entry_id, foreign_label.id)
    with pytest.raises(NotFoundError):
        crud_entry_label.read_db_entries_for_label(db_session, principal, foreign_label.id)
    with pytest.raises(NotFoundError):
        crud_entry_label.read_db_labels_for_entry(db_session, other, entry_id)


def test_deleting_label_removes_links(db_session, tagged) -> None:
    principal, entry_id, label_id = tagged
    crud_entry_label.add_label_to_entry(db_session, principal, entry_id, label_id)

    crud_label.delete_db_label(db_session, principal, label_id)

    assert db_session.query(EntryLabelDB).count() == 0
    assert crud_entry_label.read_db_labels_for_entry(db_session, principal, entry_id) == []


@pytest.fixture
def two_entries(db_session, tagged):
    principal, entry_id, label_id = tagged
    category = new_category(db_session, principal, name=b"second")
    subcategory = new_subcategory(db_session, principal, category.id)
    other_entry_id = new_entry(db_session, principal, subcategory.id).id
    other_label_id = crud_label.create_db_label(
        db_session, principal, LabelCreate(name=b64(b"home"), colour_id=2)
    ).id
    return principal, (entry_id, other_entry_id), (label_id, other_label_id)


def test_batch_link_and_list(db_session, two_entries) -> None:
    principal, (first_entry, second_entry), (work, home) = two_entries

    links = crud_entry_label.add_labels_to_entries(
        db_session, principal, [first_entry, first_entry, second_entry], [work, home, home]
    )
    assert [(link.entry_id, link.label_id) for link in links] == [
        (first_entry, work), (first_entry, home), (second_entry, home)
    ]

    labels = crud_entry_label.read_db_labels_for_entries(db_session, principal, [second_entry, first_entry])
    assert [[label.id for label in entry_labels] for entry_labels in labels] == [[home], [work, home]]


def test_batch_link_with_duplicate_writes_nothing(db_session, two_entries) -> None:
    principal, (first_entry, second_entry), (work, home) = two_entries
    crud_entry_label.add_label_to_entry(db_session, principal, second_entry, home)

    with pytest.raises(ConflictError):
        crud_entry_label.add_labels_to_entries(db_session, principal, [first_entry, second_entry], [work, home])

    assert db_session.query(EntryLabelDB).count() == 1


def test_batch_link_with_foreign_label_writes_nothing(db_session, make_user, two_entries) -> None:
    principal, (first_entry, second_entry), (work, _) = two_entries
    _, other = make_user("b", b"p2")
    foreign_label_id = crud_label.create_db_label(db_session, other, LabelCreate(name=b64(b"x"), colour_id=1)).id

    with pytest.raises(NotFoundError):
        crud_entry_label.add_labels_to_entries(
            db_session, principal, [first_entry, second_entry], [work, foreign_label_id]
        )

    assert db_session.query(EntryLabelDB).count() == 0


def test_batch_link_rejects_mismatched_lengths(db_session, two_entries) -> None:
    principal, (first_entry, second_entry), (work, _) = two_entries

    with pytest.raises(ValueError, match="must be equal"):
        crud_entry_label.add_labels_to_entries(db_session, principal, [first_entry, second_entry], [work])
    with pytest.raises(ValueError, match="must be equal"):
        crud_entry_label.remove_labels_from_entries(db_session, principal, [first_entry], [work, work])


def test_batch_unlink_is_all_or_nothing(db_session, two_entries) -> None:
    principal, (first_entry, second_entry), (work, home) = two_entries
    crud_entry_label.add_labels_to_entries(db_session, principal, [first_entry, second_entry], [work, home])

    with pytest.raises(NotFoundError, match=f"Label {work} is not attached to entry {second_entry}"):
        crud_entry_label.remove_labels_from_entries(
            db_session, principal, [first_entry, second_entry], [work, work]
        )
    assert db_session.query(EntryLabelDB).count() == 2

    assert crud_entry_label.remove_labels_from_entries(
        db_session, principal, [first_entry, second_entry], [work, home]
    ) == [1, 1]
    assert db_session.query(EntryLabelDB).count() == 0
