import itertools
import sys
import types
from pathlib import Path
from typing import Dict, List, Optional

import pytest

# Ensure project root is on sys.path
sys.path.append(str(Path(__file__).resolve().parents[1]))


# In-memory stand-ins for pymongo collections, shared by the config.database
# stub and the repository tests.

class DummyCursor(list):
    def sort(self, key, direction=1):
        return DummyCursor(sorted(self, key=lambda d: d.get(key), reverse=direction < 0))


class DummyCollection:
    def __init__(self, docs=None):
        self.docs: List[dict] = list(docs or [])
        self.indexes: List[tuple] = []
        self._oids = itertools.count(1)

    @staticmethod
    def _matches(doc, query):
        for key, expected in (query or {}).items():
            if isinstance(expected, dict) and "$in" in expected:
                if doc.get(key) not in expected["$in"]:
                    return False
            elif doc.get(key) != expected:
                return False
        return True

    def create_index(self, keys, **kwargs):
        self.indexes.append((keys, kwargs))

    def find(self, query=None, projection=None):
        return DummyCursor(dict(d) for d in self.docs if self._matches(d, query))

    def find_one(self, query=None):
        return next(iter(self.find(query)), None)

    def insert_one(self, doc):
        doc = dict(doc)
        doc.setdefault("_id", f"oid-{next(self._oids)}")
        self.docs.append(doc)
        return types.SimpleNamespace(inserted_id=doc["_id"])

    def update_one(self, query, update, upsert=False):
        for doc in self.docs:
            if self._matches(doc, query):
                doc.update(update.get("$set", {}))
                return types.SimpleNamespace(upserted_id=None)
        if not upsert:
            return types.SimpleNamespace(upserted_id=None)
        result = self.insert_one({**query, **update.get("$setOnInsert", {}), **update.get("$set", {})})
        return types.SimpleNamespace(upserted_id=result.inserted_id)


class DummyMongoConn:
    def __init__(self):
        self.collections: Dict[str, DummyCollection] = {}

    def collection(self, name):
        return self.collections.setdefault(name, DummyCollection())

    __getitem__ = collection


dummy_db_module = types.ModuleType("config.database")
dummy_db_module.mongodb = DummyMongoConn()

dummy_db_module.bootstrap_indexes = lambda: None

sys.modules["config.database"] = dummy_db_module


from domain.models.delegate import Delegate  # noqa: E402
from domain.models.parent import DelegateParentLink, Parent  # noqa: E402
from domain.models.program import (  # noqa: E402
    AssignmentRole,
    Program,
    ProgramAssignment,
    ProgramYear,
)
from domain.models.reference import GroupingRef, PartyRef  # noqa: E402
from domain.models.staff import Staff  # noqa: E402
from domain.models.user import User  # noqa: E402
from services.stores import RosterStores  # noqa: E402

_ids = itertools.count(1)


def _next_id(prefix: str) -> str:
    return f"{prefix}-{next(_ids)}"


class FakeProgramRepository:
    def __init__(self) -> None:
        self.programs: Dict[str, Program] = {}
        self.years: Dict[str, ProgramYear] = {}

    def find_program(self, program_id):
        return self.programs.get(program_id)

    def find_year(self, program_year_id):
        return self.years.get(program_year_id)


class FakeAssignmentRepository:
    def __init__(self) -> None:
        self.rows: List[ProgramAssignment] = []

    def find(self, user_id, program_id):
        for row in self.rows:
            if row.user_id == user_id and row.program_id == program_id:
                return row
        return None

    def create(self, user_id, program_id, role):
        row = ProgramAssignment(id=_next_id("pa"), user_id=user_id, program_id=program_id, role=role)
        self.rows.append(row)
        return row


class FakeUserRepository:
    def __init__(self) -> None:
        self.users: Dict[str, User] = {}

    def find_by_email(self, email):
        return self.users.get(email.strip().lower())

    def create(self, email, password_hash):
        user = User(id=_next_id("user"), email=email, password_hash=password_hash)
        self.users[user.email] = user
        return user

    def existing_emails(self, emails):
        return {e.lower() for e in emails if e.lower() in self.users}


class FakeDelegateRepository:
    def __init__(self) -> None:
        self.delegates: Dict[str, Delegate] = {}
        self.fail_on_create: set = set()
        self.fail_on_update: set = set()
        self.updates: List[tuple] = []

    def find(self, program_year_id, email):
        for d in self.delegates.values():
            if d.program_year_id == program_year_id and d.email == email.strip().lower():
                return d
        return None

    def create(self, delegate):
        if delegate.email in self.fail_on_create:
            raise RuntimeError("simulated store failure")
        saved = delegate.model_copy(update={"id": _next_id("del")})
        self.delegates[saved.id] = saved
        return saved

    def update(self, delegate_id, data):
        if delegate_id in self.fail_on_update:
            raise RuntimeError("simulated update failure")
        self.updates.append((delegate_id, dict(data)))
        updated = self.delegates[delegate_id].model_copy(update=data)
        self.delegates[delegate_id] = updated
        return updated

    def list_for_year(self, program_year_id):
        return [d for d in self.delegates.values() if d.program_year_id == program_year_id]

    def add(self, program_year_id, first_name, last_name, **fields):
        delegate = Delegate(
            id=_next_id("del"),
            program_year_id=program_year_id,
            first_name=first_name,
            last_name=last_name,
            email=fields.pop("email", f"{first_name}.{last_name}@example.com".lower()),
            **fields,
        )
        self.delegates[delegate.id] = delegate
        return delegate


class FakeStaffRepository:
    def __init__(self) -> None:
        self.staff: List[Staff] = []

    def find(self, program_year_id, email):
        for s in self.staff:
            if s.program_year_id == program_year_id and s.email == email.strip().lower():
                return s
        return None

    def create(self, staff):
        saved = staff.model_copy(update={"id": _next_id("staff")})
        self.staff.append(saved)
        return saved


class FakeParentRepository:
    def __init__(self) -> None:
        self.parents: List[Parent] = []
        self.links: List[DelegateParentLink] = []

    def find(self, program_year_id, email):
        for p in self.parents:
            if p.program_year_id == program_year_id and p.email == email.strip().lower():
                return p
        return None

    def create(self, parent):
        saved = parent.model_copy(update={"id": _next_id("parent")})
        self.parents.append(saved)
        return saved

    def find_or_create_link(self, delegate_id, parent_id, program_year_id):
        for link in self.links:
            if link.delegate_id == delegate_id and link.parent_id == parent_id:
                return link, False
        link = DelegateParentLink(
            id=_next_id("link"),
            delegate_id=delegate_id,
            parent_id=parent_id,
            program_year_id=program_year_id,
        )
        self.links.append(link)
        return link, True


class FakeReferenceRepository:
    def __init__(self) -> None:
        self.year_groupings: Dict[str, List[GroupingRef]] = {}
        self.year_parties: Dict[str, List[PartyRef]] = {}
        self.program_groupings: Dict[str, List[dict]] = {}
        self.program_parties: Dict[str, List[dict]] = {}

    def list_active_groupings_for_year(self, program_year_id):
        return list(self.year_groupings.get(program_year_id, []))

    def list_active_parties_for_year(self, program_year_id):
        return list(self.year_parties.get(program_year_id, []))

    def list_program_groupings(self, program_id):
        return list(self.program_groupings.get(program_id, []))

    def list_program_parties(self, program_id):
        return list(self.program_parties.get(program_id, []))


PROGRAM_ID = "prog-1"
YEAR_ID = "py-1"
ADMIN_ID = "admin-1"
MEMBER_ID = "member-1"


def make_stores() -> RosterStores:
    stores = RosterStores(
        programs=FakeProgramRepository(),
        assignments=FakeAssignmentRepository(),
        users=FakeUserRepository(),
        delegates=FakeDelegateRepository(),
        staff=FakeStaffRepository(),
        parents=FakeParentRepository(),
        references=FakeReferenceRepository(),
    )
    stores.programs.programs[PROGRAM_ID] = Program(id=PROGRAM_ID, name="Boys State")
    stores.programs.years[YEAR_ID] = ProgramYear(id=YEAR_ID, program_id=PROGRAM_ID, year=2025)
    stores.assignments.create(ADMIN_ID, PROGRAM_ID, AssignmentRole.admin)
    stores.assignments.create(MEMBER_ID, PROGRAM_ID, AssignmentRole.staff)
    return stores


@pytest.fixture
def stores() -> RosterStores:
    return make_stores()


@pytest.fixture
def hasher():
    return lambda plain: f"hashed::{plain}"


@pytest.fixture
def app_client(monkeypatch, stores):
    """Flask test client whose services run against the in-memory stores."""
    monkeypatch.setattr(RosterStores, "default", classmethod(lambda cls: stores))

    from app import create_app

    app = create_app()
    app.config["TESTING"] = True
    with app.test_client() as client:
        with client.session_transaction() as sess:
            sess["user_id"] = ADMIN_ID
        yield client


@pytest.fixture
def dummy_mongo():
    return DummyMongoConn()
