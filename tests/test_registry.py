"""
Tests for the visitor registry.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from visitor_import.errors import RegistryCreationError, TransientPersistenceError
from visitor_import.models import Visitor
from visitor_import.registry import VisitorRegistry
from visitor_import.storage import VisitorRepository, VisitorRow


class BrokenVisitorRepository(VisitorRepository):
    """Repository whose inserts always fail."""

    def create(self, session, address):
        raise IntegrityError("INSERT INTO visitors", {"address": address}, Exception("constraint failed"))


class TestGetOrCreate:
    """Test lazy visitor creation."""

    def test_creates_new_visitor(self, batches):
        registry = VisitorRegistry()
        ctx = batches.begin()

        visitor = registry.get_or_create(ctx, "24.99.237.149")

        assert visitor.address == "24.99.237.149"
        assert visitor.visit_count == 0
        assert visitor.whitelist == set()
        assert visitor.created_at is not None
        assert registry.created_count == 1

    def test_is_idempotent(self, batches):
        registry = VisitorRegistry()
        ctx = batches.begin()

        first, created_first = registry.lookup(ctx, "24.99.237.149")
        second, created_second = registry.lookup(ctx, "24.99.237.149")

        assert created_first is True
        assert created_second is False
        assert first.address == second.address
        assert registry.created_count == 1
        assert registry.repository.count(ctx.session) == 1

    def test_creation_failure_is_fatal(self, batches):
        registry = VisitorRegistry(BrokenVisitorRepository())
        ctx = batches.begin()

        with pytest.raises(RegistryCreationError) as exc_info:
            registry.get_or_create(ctx, "24.99.237.149")
        assert exc_info.value.address == "24.99.237.149"
        assert exc_info.value.fatal is True

    def test_existing_visitor_needs_no_insert(self, batches, session_factory):
        """Test that a known visitor is found even if inserts are broken."""
        ctx = batches.begin()
        VisitorRegistry().get_or_create(ctx, "10.0.0.1")

        visitor = VisitorRegistry(BrokenVisitorRepository()).get_or_create(ctx, "10.0.0.1")
        assert visitor.address == "10.0.0.1"


class TestCountsAndIgnoreList:
    """Test visit counting and whitelist checks."""

    def test_increment_count(self, batches, session_factory):
        registry = VisitorRegistry()
        ctx = batches.begin()
        registry.get_or_create(ctx, "10.0.0.1")

        assert registry.increment_count(ctx, "10.0.0.1") == 1
        assert registry.increment_count(ctx, "10.0.0.1") == 2
        batches.finish()

        with session_factory() as session:
            assert session.get(VisitorRow, "10.0.0.1").visit_count == 2

    def test_increment_unknown_address(self, batches):
        ctx = batches.begin()
        with pytest.raises(TransientPersistenceError):
            VisitorRegistry().increment_count(ctx, "10.9.9.9")

    def test_is_ignored(self):
        visitor = Visitor(address="10.0.0.1", whitelist={"10.0.0.1"})
        assert VisitorRegistry.is_ignored(visitor, "10.0.0.1")
        assert not VisitorRegistry.is_ignored(visitor, "10.0.0.2")
        assert not VisitorRegistry.is_ignored(Visitor(address="10.0.0.3"), "10.0.0.3")

    def test_exempt_persists_whitelist(self, batches, session_factory):
        registry = VisitorRegistry()
        ctx = batches.begin()

        visitor = registry.exempt(ctx, "10.0.0.1")
        assert registry.is_ignored(visitor, "10.0.0.1")

        # Exempting twice keeps a single entry
        registry.exempt(ctx, "10.0.0.1")
        batches.finish()

        with session_factory() as session:
            row = session.get(VisitorRow, "10.0.0.1")
            assert row.whitelist == ["10.0.0.1"]
            assert row.visit_count == 0
