"""
Integration tests for substance resolution against moto and a fake registry.
"""

from unittest.mock import patch

import httpx
import pytest

from chem_inventory.dal.dynamodb_handler import DALError
from chem_inventory.dal.registry_client import RegistryClient
from chem_inventory.handlers.utils.errors import PersistenceError, RegistryFetchError, SubstanceLookupError
from chem_inventory.logic.substance_resolver import SubstanceResolver, build_auxiliary_rows
from chem_inventory.models.substance import AuxiliaryKind, RegistrySubstance, Substance


@pytest.fixture
def resolver(store, registry_client) -> SubstanceResolver:
    return SubstanceResolver(store, registry_client)


class TestBuildAuxiliaryRows:
    """Test cases for mapping registry collections."""

    def test_empty_collections_skipped(self, benzene_payload):
        rows = build_auxiliary_rows(RegistrySubstance.model_validate(benzene_payload))

        assert set(rows) == {AuxiliaryKind.SYNONYM, AuxiliaryKind.EXPERIMENTAL_PROPERTY, AuxiliaryKind.CITATION}
        assert rows[AuxiliaryKind.SYNONYM][1] == {"name": "Benzol"}
        assert rows[AuxiliaryKind.EXPERIMENTAL_PROPERTY][0] == {
            "name": "Boiling Point",
            "property": "80.0 °C",
            "unit": None,
            "source_number": 1,
        }
        assert rows[AuxiliaryKind.CITATION][0]["source"] == "Haynes, CRC Handbook of Chemistry and Physics"


class TestResolve:
    """Test cases for SubstanceResolver.resolve."""

    def test_new_identifier_creates_one_substance(self, resolver, store, registry_requests):
        """Test importing an unknown identifier from the registry."""
        resolved = resolver.resolve("71-43-2")

        assert resolved.is_new is True
        assert len(registry_requests) == 1
        assert store.find_substance_id("71-43-2") == resolved.substance_id

        substance = store.get_substance("71-43-2")
        assert substance.molecular_formula == "C6H6"
        assert substance.molecular_mass == 78.11

        assert all(outcome.succeeded for outcome in resolved.auxiliary_outcomes)
        assert len(store.list_auxiliary_rows(resolved.substance_id, AuxiliaryKind.SYNONYM)) == 3
        assert len(store.list_auxiliary_rows(resolved.substance_id, AuxiliaryKind.EXPERIMENTAL_PROPERTY)) == 2
        assert len(store.list_auxiliary_rows(resolved.substance_id, AuxiliaryKind.CITATION)) == 2
        assert store.list_auxiliary_rows(resolved.substance_id, AuxiliaryKind.PREDICTED_PROPERTY) == []

    def test_existing_identifier_skips_registry(self, resolver, store, registry_requests):
        """Test that a known identifier never calls the registry."""
        substance_id = store.insert_substance(Substance(cas_rn="71-43-2", name="Benzene"))

        resolved = resolver.resolve("71-43-2")

        assert resolved.substance_id == substance_id
        assert resolved.is_new is False
        assert registry_requests == []

    def test_second_resolve_reuses_substance(self, resolver, registry_requests):
        first = resolver.resolve("71-43-2")
        second = resolver.resolve("71-43-2")

        assert second.substance_id == first.substance_id
        assert second.is_new is False
        assert len(registry_requests) == 1

    def test_requested_identifier_is_stored(self, store, registry_http_factory, benzene_payload):
        """Test that rows are keyed by the requested identifier, not the registry's."""
        benzene_payload["rn"] = "71-43-2-canonical"
        client = RegistryClient(
            api_key="k",
            http_client=registry_http_factory(lambda request: httpx.Response(200, json=benzene_payload)),
        )

        resolved = SubstanceResolver(store, client).resolve("71-43-2")

        assert store.find_substance_id("71-43-2") == resolved.substance_id
        assert store.find_substance_id("71-43-2-canonical") is None

    def test_one_auxiliary_failure_tolerated(self, resolver, store):
        """Test that a failing auxiliary collection does not undo the substance."""
        original_insert = store.insert_auxiliary_rows

        def failing_synonyms(substance_id, kind, rows):
            if kind is AuxiliaryKind.SYNONYM:
                raise DALError("throttled", operation="BatchWriteItem", table_name="test-inventory-table")
            return original_insert(substance_id, kind, rows)

        with patch.object(store, "insert_auxiliary_rows", side_effect=failing_synonyms):
            resolved = resolver.resolve("71-43-2")

        assert resolved.is_new is True
        assert store.find_substance_id("71-43-2") == resolved.substance_id

        outcomes = {outcome.name: outcome for outcome in resolved.auxiliary_outcomes}
        assert outcomes["SYNONYM"].succeeded is False
        assert outcomes["CITATION"].succeeded is True
        assert store.list_auxiliary_rows(resolved.substance_id, AuxiliaryKind.SYNONYM) == []
        assert len(store.list_auxiliary_rows(resolved.substance_id, AuxiliaryKind.CITATION)) == 2

    def test_concurrent_insert_reuses_winner(self, resolver, store):
        """Test losing the race between the existence check and the insert."""
        winner_id = store.insert_substance(Substance(cas_rn="71-43-2", name="Benzene"))

        with patch.object(store, "find_substance_id", side_effect=[None, winner_id]):
            resolved = resolver.resolve("71-43-2")

        assert resolved.substance_id == winner_id
        assert resolved.is_new is False
        assert resolved.auxiliary_outcomes == []

    def test_unknown_identifier(self, resolver, store):
        with pytest.raises(RegistryFetchError):
            resolver.resolve("0000-00-0")
        assert store.find_substance_id("0000-00-0") is None

    def test_lookup_failure(self, resolver, store, registry_requests):
        error = DALError("timeout", operation="GetItem", table_name="test-inventory-table")

        with patch.object(store, "find_substance_id", side_effect=error):
            with pytest.raises(SubstanceLookupError):
                resolver.resolve("71-43-2")

        assert registry_requests == []

    def test_insert_failure(self, resolver, store):
        error = DALError("throttled", operation="PutItem", table_name="test-inventory-table")

        with patch.object(store, "insert_substance", side_effect=error):
            with pytest.raises(PersistenceError) as exc_info:
                resolver.resolve("71-43-2")

        assert "Substance insert failed" in exc_info.value.message
