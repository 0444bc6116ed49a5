"""Tests for the identity repository."""

import pytest

from gitidm.errors import NotFoundError, ValidationError
from gitidm.identities.models import IdentityFields, key_file_command
from gitidm.identities.repository import IdentityRepository, group_entries


def _add(repository: IdentityRepository, identity_id: str, **fields) -> None:
    repository.upsert(identity_id, IdentityFields(**fields))


def _add_complete(repository: IdentityRepository, identity_id: str) -> None:
    _add(
        repository,
        identity_id,
        name=f"{identity_id} name",
        email=f"{identity_id}@example.com",
        ssh_command=f"ssh -i ~/.ssh/{identity_id}",
    )


def test_add_then_get_returns_supplied_fields(repository) -> None:
    _add(repository, "work", name="Alice", email="alice@work.com", ssh_command="ssh -p 22")
    identity = repository.get("work")
    assert identity.id == "work"
    assert identity.name == "Alice"
    assert identity.email == "alice@work.com"
    assert identity.ssh_command == "ssh -p 22"
    assert identity.ssh_key is None


def test_add_with_key_derives_ssh_command(repository) -> None:
    _add(repository, "work", name="Alice", email="a@w.com", ssh_key="/path/to/key")
    identity = repository.get("work")
    assert identity.ssh_key == "/path/to/key"
    assert identity.ssh_command == "ssh -i /path/to/key -o IdentitiesOnly=yes -F /dev/null"


def test_persisted_key_layout(repository, store) -> None:
    _add(repository, "work", name="Alice", email="a@w.com", ssh_key="/k")
    assert store.values == {
        "gitidm.work.name": "Alice",
        "gitidm.work.email": "a@w.com",
        "gitidm.work.sshKey": "/k",
        "gitidm.work.sshCommand": key_file_command("/k"),
    }


@pytest.mark.parametrize(
    "fields",
    [
        {},
        {"name": "A", "email": "e", "ssh_command": "ssh"},
        {"ssh_key": "/k", "ssh_command": "ssh"},
    ],
)
def test_reserved_id_always_rejected(repository, store, fields) -> None:
    with pytest.raises(ValidationError):
        repository.upsert("all", IdentityFields(**fields))
    assert store.writes == []


def test_conflicting_auth_method_writes_nothing(repository, store) -> None:
    _add_complete(repository, "work")
    before = dict(store.values)
    store.writes.clear()

    with pytest.raises(ValidationError, match="conflicting auth method"):
        _add(repository, "work", name="New", ssh_key="/k", ssh_command="ssh")

    assert store.values == before
    assert store.writes == []


@pytest.mark.parametrize(
    "fields",
    [
        {"email": "e", "ssh_command": "ssh"},
        {"name": "A", "ssh_command": "ssh"},
        {"name": "A", "email": "e"},
    ],
)
def test_incomplete_new_identity_rejected(repository, store, fields) -> None:
    with pytest.raises(ValidationError, match="incomplete new identity"):
        _add(repository, "work", **fields)
    assert store.values == {}


def test_update_merges_single_field(repository) -> None:
    _add(repository, "work", name="Alice", email="a@w.com", ssh_command="ssh -p 22")
    _add(repository, "work", email="alice@new.com")

    identity = repository.get("work")
    assert identity.name == "Alice"
    assert identity.email == "alice@new.com"
    assert identity.ssh_command == "ssh -p 22"


def test_readding_does_not_duplicate(repository) -> None:
    _add_complete(repository, "work")
    _add(repository, "work", name="Again")
    assert repository.ids() == ["work"]


def test_get_missing_returns_none(repository) -> None:
    assert repository.get("nobody") is None


def test_exists_is_scoped_to_exact_id(repository) -> None:
    _add_complete(repository, "work2")
    assert repository.exists("work2")
    assert not repository.exists("work")


def test_exists_ignores_dotted_id_sharing_prefix(repository, store) -> None:
    _add_complete(repository, "work.alt")
    assert repository.exists("work.alt")
    assert not repository.exists("work")

    with pytest.raises(ValidationError, match="incomplete new identity"):
        _add(repository, "work", name="Only")
    assert "gitidm.work.name" not in store.values


def test_remove_leaves_dotted_id_sharing_prefix(repository) -> None:
    _add_complete(repository, "work")
    _add_complete(repository, "work.alt")

    repository.remove("work")

    assert repository.ids() == ["work.alt"]


def test_list_keeps_store_order_grouped_by_id(repository) -> None:
    _add_complete(repository, "zeta")
    _add_complete(repository, "alpha")

    grouped = group_entries(repository.list())
    assert list(grouped) == ["zeta", "alpha"]
    assert [field for field, _ in grouped["zeta"]] == ["name", "email", "sshCommand"]


def test_list_normalizes_lowercased_field_names(store) -> None:
    store.values["gitidm.work.sshcommand"] = "ssh"
    store.values["gitidm.work.sshkey"] = "/k"
    repository = IdentityRepository(store)
    assert repository.list() == [("work", "sshCommand", "ssh"), ("work", "sshKey", "/k")]
    assert repository.get("work").ssh_key == "/k"


def test_list_ignores_unrelated_keys(repository, store) -> None:
    store.values["user.name"] = "Someone"
    store.values["gitidm.stray"] = "x"
    _add_complete(repository, "work")
    assert repository.ids() == ["work"]


def test_remove_single(repository) -> None:
    _add_complete(repository, "work")
    _add_complete(repository, "home")

    report = repository.remove("work")

    assert report.removed == ["work"]
    assert repository.ids() == ["home"]


def test_remove_missing_raises_not_found(repository) -> None:
    with pytest.raises(NotFoundError):
        repository.remove("nobody")


def test_remove_all_continues_past_failures(repository, store) -> None:
    for identity_id in ("one", "two", "three"):
        _add_complete(repository, identity_id)
    store.failing_sections.add("gitidm.two")

    report = repository.remove("all")

    assert report.removed == ["one", "three"]
    assert list(report.failed) == ["two"]
    assert repository.ids() == ["two"]


def test_remove_all_when_empty(repository) -> None:
    report = repository.remove("all")
    assert report.outcomes == {}
