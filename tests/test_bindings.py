"""
Tests for tireworks/bindings.py: per-kind snapshots, mutations and the registry.
"""

import asyncio
from datetime import date, datetime

import pytest

from conftest import FakeStore, cost_row, make_binding, sale_payload
from finance_dashboard.views import ViewContext
from finance_dashboard.state import TabOrchestrator
from tireworks.bindings import BindingRegistry
from tireworks.errors import NotFoundError, StoreUnavailableError, ValidationError
from tireworks.kinds import DataKind
from tireworks.models.schemas import DefectiveTireSale, FixedCost


# ===========================================================================
# Read Side Tests
# ===========================================================================

class TestSnapshot:
    """Snapshot, loading flag and listeners of one binding."""

    def test_refresh_parses_rows_into_entities(self):
        """Rows from the store become frozen entity read models."""
        store = FakeStore(rows=[cost_row("a"), cost_row("b", archived=True)])
        binding = make_binding(DataKind.FIXED_COSTS, store)

        assert binding.snapshot() == ()
        asyncio.run(binding.refresh())

        assert {e.id for e in binding.snapshot()} == {"a", "b"}
        assert all(isinstance(e, FixedCost) for e in binding.snapshot())
        assert binding.loaded

    def test_snapshot_is_ordered_by_kind_sort_field(self):
        """Sales are listed newest sale_date first."""
        store = FakeStore()
        binding = make_binding(DataKind.DEFECTIVE_TIRE_SALES, store)

        async def scenario():
            for day in ("2024-01-05", "2024-01-20", "2024-01-12"):
                await binding.add(sale_payload(sale_date=day))

        asyncio.run(scenario())
        assert [s.sale_date.day for s in binding.snapshot()] == [20, 12, 5]

    def test_is_loading_only_while_refresh_in_flight(self):
        """The loading flag is up during fetch_all and down afterwards."""
        store = FakeStore(rows=[cost_row("a")])
        binding = make_binding(DataKind.FIXED_COSTS, store)
        seen = []

        async def scenario():
            store.fetch_gate = asyncio.Event()
            task = asyncio.ensure_future(binding.refresh())
            await asyncio.sleep(0)
            seen.append(binding.is_loading())
            store.fetch_gate.set()
            await task
            seen.append(binding.is_loading())

        asyncio.run(scenario())
        assert seen == [True, False]

    def test_failed_refresh_clears_loading_and_keeps_snapshot(self):
        """A failing read leaves the previous snapshot in place."""
        store = FakeStore(rows=[cost_row("a")])
        binding = make_binding(DataKind.FIXED_COSTS, store)
        asyncio.run(binding.refresh())

        store.fail_with["fetch_all"] = StoreUnavailableError("offline")
        with pytest.raises(StoreUnavailableError):
            asyncio.run(binding.refresh())

        assert binding.is_loading() is False
        assert [e.id for e in binding.snapshot()] == ["a"]

    def test_malformed_store_row_is_a_validation_error(self):
        """A row that fails the entity schema is reported, not stored."""
        store = FakeStore(rows=[{"id": "x", "created_at": "2024-01-01T00:00:00", "amount": -5}])
        binding = make_binding(DataKind.FIXED_COSTS, store)

        with pytest.raises(ValidationError):
            asyncio.run(binding.refresh())

    def test_listeners_are_notified_and_can_unsubscribe(self):
        """Listeners see every change until they unsubscribe."""
        store = FakeStore()
        binding = make_binding(DataKind.FIXED_COSTS, store)
        calls = []
        unsubscribe = binding.subscribe(lambda b: calls.append(len(b.snapshot())))

        asyncio.run(binding.add({"name": "Rent", "amount": 2500}))
        assert calls and calls[-1] == 1

        unsubscribe()
        count = len(calls)
        asyncio.run(binding.add({"name": "Power", "amount": 900}))
        assert len(calls) == count

    def test_invalidate_and_load_reread_the_store(self):
        """load() and invalidate() both go back to the store."""
        store = FakeStore(rows=[cost_row("a")])
        binding = make_binding(DataKind.FIXED_COSTS, store)

        asyncio.run(binding.load())
        store.rows.append(cost_row("b"))
        asyncio.run(binding.invalidate())

        assert store.count("fetch_all") == 2
        assert {e.id for e in binding.snapshot()} == {"a", "b"}


# ===========================================================================
# Mutation Tests
# ===========================================================================

class TestMutations:
    """add / update / delete against the store."""

    def test_add_is_visible_before_the_call_resolves(self):
        """The created entity is in the snapshot without a refresh."""
        store = FakeStore(ids=["abc"])
        binding = make_binding(DataKind.DEFECTIVE_TIRE_SALES, store)

        created = asyncio.run(binding.add(sale_payload()))

        assert created.id == "abc"
        assert binding.snapshot() == (created,)
        assert store.count("fetch_all") == 0

    def test_add_keeps_dates_as_dates(self):
        """ISO date strings are parsed before the write."""
        binding = make_binding(DataKind.DEFECTIVE_TIRE_SALES, FakeStore())
        created = asyncio.run(binding.add(sale_payload(sale_date="2024-03-01")))
        assert created.sale_date == date(2024, 3, 1)

    def test_add_validates_before_touching_the_store(self):
        """Invalid input never reaches insert."""
        store = FakeStore()
        binding = make_binding(DataKind.DEFECTIVE_TIRE_SALES, store)

        with pytest.raises(ValidationError):
            asyncio.run(binding.add(sale_payload(quantity=0)))
        assert store.count("insert") == 0

    @pytest.mark.parametrize(
        "extra", [{"id": "mine"}, {"created_at": "1999-01-01T00:00:00"}]
    )
    def test_add_rejects_store_assigned_keys(self, extra):
        """Callers cannot choose id or created_at."""
        store = FakeStore()
        binding = make_binding(DataKind.DEFECTIVE_TIRE_SALES, store)

        with pytest.raises(ValidationError):
            asyncio.run(binding.add(sale_payload(**extra)))
        assert store.calls == []

    def test_add_rejects_an_entity_instance(self):
        """An entity carries id/created_at and is not accepted as input."""
        store = FakeStore()
        binding = make_binding(DataKind.DEFECTIVE_TIRE_SALES, store)
        entity = DefectiveTireSale(
            id="caller-chosen",
            created_at=datetime(1999, 1, 1),
            tire_name="X",
            quantity=3,
            sale_value=150.0,
            sale_date=date(2024, 1, 10),
        )

        with pytest.raises(ValidationError):
            asyncio.run(binding.add(entity))
        assert store.calls == []

    def test_add_passes_through_an_empty_store_result(self):
        """No echoed row means add() returns None."""
        store = FakeStore()
        store.insert_returns_none = True
        binding = make_binding(DataKind.DEFECTIVE_TIRE_SALES, store)

        assert asyncio.run(binding.add(sale_payload())) is None
        assert binding.snapshot() == ()

    def test_add_treats_echo_without_identity_as_empty(self):
        """An echo missing id/created_at is not a usable entity."""
        store = FakeStore()
        store.echo_without_identity = True
        binding = make_binding(DataKind.DEFECTIVE_TIRE_SALES, store)

        assert asyncio.run(binding.add(sale_payload())) is None
        assert binding.snapshot() == ()
        assert store.count("insert") == 1

    def test_update_replaces_entity_in_place(self):
        """update() swaps one entity; earlier snapshots stay untouched."""
        store = FakeStore(rows=[cost_row("a"), cost_row("b")])
        binding = make_binding(DataKind.FIXED_COSTS, store)
        asyncio.run(binding.refresh())
        before = binding.snapshot()

        updated = asyncio.run(binding.update("a", {"amount": 150}))

        assert updated.amount == 150
        assert binding.find("a").amount == 150
        assert len(binding.snapshot()) == 2
        assert [e.amount for e in before] == [100.0, 100.0]

    def test_update_missing_entity_raises_not_found(self):
        """Updating an unknown id raises NotFoundError."""
        binding = make_binding(DataKind.FIXED_COSTS, FakeStore())

        with pytest.raises(NotFoundError):
            asyncio.run(binding.update("ghost", {"archived": True}))

    def test_update_rejects_store_assigned_fields(self):
        """Patches cannot touch created_at."""
        store = FakeStore(rows=[cost_row("a")])
        binding = make_binding(DataKind.FIXED_COSTS, store)

        with pytest.raises(ValidationError):
            asyncio.run(binding.update("a", {"created_at": "2024-01-01T00:00:00"}))
        assert store.count("update") == 0

    def test_delete_removes_from_snapshot(self):
        """delete() drops the entity; a second delete is NotFound."""
        store = FakeStore(rows=[cost_row("a"), cost_row("b")])
        binding = make_binding(DataKind.FIXED_COSTS, store)
        asyncio.run(binding.refresh())

        asyncio.run(binding.delete("a"))

        assert [e.id for e in binding.snapshot()] == ["b"]
        with pytest.raises(NotFoundError):
            asyncio.run(binding.delete("a"))

    def test_store_failure_propagates_from_mutations(self):
        """Transport failures surface unchanged."""
        store = FakeStore()
        store.fail_with["insert"] = StoreUnavailableError("offline")
        binding = make_binding(DataKind.FIXED_COSTS, store)

        with pytest.raises(StoreUnavailableError):
            asyncio.run(binding.add({"name": "Rent", "amount": 1}))
        assert binding.snapshot() == ()


# ===========================================================================
# Registry Tests
# ===========================================================================

class TestBindingRegistry:
    """Tests for BindingRegistry."""

    def test_get_creates_each_binding_once(self, registry):
        """get() by enum or string returns the same binding."""
        first = registry.get(DataKind.CASH_FLOW)
        assert registry.get("cash_flow") is first

    def test_unknown_kind_without_store(self):
        """A kind without a configured store is a KeyError."""
        reg = BindingRegistry({DataKind.CASH_FLOW: FakeStore()})
        with pytest.raises(KeyError):
            reg.get(DataKind.FIXED_COSTS)

    def test_load_all_refreshes_every_kind(self, registry, fake_stores):
        """load_all() reads every store once."""
        asyncio.run(registry.load_all())
        assert all(store.count("fetch_all") == 1 for store in fake_stores.values())
        assert all(registry.get(kind).loaded for kind in registry.kinds)

    def test_refresh_all_rereads_every_kind(self, registry, fake_stores):
        """refresh_all() is a full second pass over the stores."""
        asyncio.run(registry.load_all())
        asyncio.run(registry.refresh_all())
        assert all(store.count("fetch_all") == 2 for store in fake_stores.values())

    def test_load_all_waits_for_everything_then_raises(self, registry, fake_stores):
        """One failing kind does not stop the others from loading."""
        fake_stores[DataKind.MATERIALS].fail_with["fetch_all"] = StoreUnavailableError("down")

        with pytest.raises(StoreUnavailableError):
            asyncio.run(registry.load_all())

        assert registry.get(DataKind.CASH_FLOW).loaded
        assert not registry.get(DataKind.MATERIALS).loaded

    def test_close_tears_down_bindings(self, registry, fake_stores):
        """close() empties bindings; later get() builds fresh ones."""
        fake_stores[DataKind.FIXED_COSTS].rows.append(cost_row("a"))
        binding = registry.get(DataKind.FIXED_COSTS)
        asyncio.run(binding.refresh())

        registry.close()

        assert binding.snapshot() == ()
        assert registry.get(DataKind.FIXED_COSTS) is not binding

    def test_views_follow_bindings_rebuilt_after_close(self, registry, fake_stores):
        """After close, a view's loading flag tracks the new bindings."""
        tabs = TabOrchestrator(ViewContext(registry))
        tabs.render()
        registry.close()
        seen = []

        async def scenario():
            store = fake_stores[DataKind.CASH_FLOW]
            store.fetch_gate = asyncio.Event()
            task = asyncio.ensure_future(registry.refresh_all())
            while not store.count("fetch_all"):
                await asyncio.sleep(0)
            seen.append(tabs.render().is_loading)
            store.fetch_gate.set()
            await task
            seen.append(tabs.render().is_loading)

        asyncio.run(scenario())
        assert seen == [True, False]
