"""Unit tests for the persistent store adapter."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from shelterfinder.core.storage import ShelterStorage
from shelterfinder.exceptions import StorageWriteError
from shelterfinder.models.settings import AppSettings, EmergencyContact, Language
from shelterfinder.models.shelter import Coordinates
from shelterfinder.utils.kv_store import MemoryKeyValueStore


def _ms_ago(delta: timedelta) -> int:
    return int((datetime.now(timezone.utc) - delta).timestamp() * 1000)


def _envelope(shelters, timestamp):
    return json.dumps({
        "shelters": shelters,
        "timestamp": timestamp,
        "count": len(shelters),
        "version": "1.0",
    })


class TestShelterSet:
    @pytest.mark.asyncio
    async def test_round_trip(self, storage, sample_shelters):
        await storage.save_shelter_set(sample_shelters)
        loaded = await storage.load_shelter_set()

        assert [s.id for s in loaded] == [s.id for s in sample_shelters]
        assert loaded == sample_shelters

    @pytest.mark.asyncio
    async def test_envelope_layout(self, storage, memory_store, sample_shelters):
        await storage.save_shelter_set(sample_shelters)

        envelope = json.loads(memory_store.data[storage.keys.SHELTERS])
        assert envelope["count"] == len(sample_shelters)
        assert envelope["version"] == "1.0"
        assert abs(envelope["timestamp"] - _ms_ago(timedelta(0))) < 60_000
        assert storage.keys.LAST_UPDATE in memory_store.data

    @pytest.mark.asyncio
    async def test_last_update_timestamp(self, storage, sample_shelters):
        assert await storage.get_last_update_timestamp() is None

        await storage.save_shelter_set(sample_shelters)
        last_update = await storage.get_last_update_timestamp()
        assert isinstance(last_update, datetime)
        assert datetime.now(timezone.utc) - last_update < timedelta(minutes=1)

    @pytest.mark.asyncio
    async def test_empty_when_absent(self, storage):
        assert await storage.load_shelter_set() == []

    @pytest.mark.asyncio
    async def test_stale_set_is_empty(self, storage, memory_store):
        record = {"id": "1", "name": "A", "latitude": 42.7, "longitude": 23.3}
        memory_store.data[storage.keys.SHELTERS] = _envelope([record], _ms_ago(timedelta(days=31)))

        assert await storage.load_shelter_set() == []

    @pytest.mark.asyncio
    async def test_recent_set_is_loaded(self, storage, memory_store):
        record = {"id": "1", "name": "A", "latitude": 42.7, "longitude": 23.3}
        memory_store.data[storage.keys.SHELTERS] = _envelope([record], _ms_ago(timedelta(days=29)))

        loaded = await storage.load_shelter_set()
        assert [s.id for s in loaded] == ["1"]

    @pytest.mark.asyncio
    async def test_custom_max_age(self, memory_store):
        storage = ShelterStorage(memory_store, max_age=timedelta(hours=1))
        record = {"id": "1", "name": "A", "latitude": 42.7, "longitude": 23.3}
        memory_store.data[storage.keys.SHELTERS] = _envelope([record], _ms_ago(timedelta(hours=2)))

        assert await storage.load_shelter_set() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", ["{not json", "[1, 2, 3]", '"text"', '{"timestamp": "yesterday"}'])
    async def test_corrupted_payload_is_empty(self, storage, memory_store, payload):
        memory_store.data[storage.keys.SHELTERS] = payload
        assert await storage.load_shelter_set() == []

    @pytest.mark.asyncio
    async def test_drops_malformed_records(self, storage, memory_store):
        records = [
            {"id": "ok", "name": "A", "latitude": 42.7, "longitude": 23.3},
            {"id": 5, "name": "numeric id", "latitude": 42.7, "longitude": 23.3},
            {"id": "no-name", "latitude": 42.7, "longitude": 23.3},
            {"id": "text-lat", "name": "B", "latitude": "42.7", "longitude": 23.3},
            {"id": "bool-lng", "name": "C", "latitude": 42.7, "longitude": True},
            {"id": "range", "name": "D", "latitude": 420, "longitude": 23.3},
            None,
        ]
        memory_store.data[storage.keys.SHELTERS] = _envelope(records, _ms_ago(timedelta(0)))

        loaded = await storage.load_shelter_set()
        assert [s.id for s in loaded] == ["ok"]

    @pytest.mark.asyncio
    async def test_read_failure_is_empty(self, failing_storage):
        assert await failing_storage.load_shelter_set() == []
        assert await failing_storage.get_last_update_timestamp() is None

    @pytest.mark.asyncio
    async def test_write_failure_raises(self, failing_storage, sample_shelters):
        with pytest.raises(StorageWriteError) as exc_info:
            await failing_storage.save_shelter_set(sample_shelters)

        assert exc_info.value.key == failing_storage.keys.SHELTERS
        assert isinstance(exc_info.value.__cause__, OSError)


class TestSettings:
    @pytest.mark.asyncio
    async def test_defaults_when_absent(self, storage):
        assert await storage.load_settings() == AppSettings()

    @pytest.mark.asyncio
    async def test_round_trip(self, storage):
        app_settings = AppSettings(
            preferred_language=Language.EN,
            max_search_distance=25,
            emergency_contacts=[EmergencyContact(id="c1", name="Мама", phone="+359888000000", relationship="майка")],
        )
        await storage.save_settings(app_settings)
        assert await storage.load_settings() == app_settings

    @pytest.mark.asyncio
    async def test_missing_keys_filled_from_defaults(self, storage, memory_store):
        memory_store.data[storage.keys.USER_SETTINGS] = json.dumps({
            "preferred_language": "en",
            "enable_notifications": False,
        })

        loaded = await storage.load_settings()
        assert loaded.preferred_language == Language.EN
        assert loaded.enable_notifications is False
        assert loaded.enable_voice_navigation is True
        assert loaded.max_search_distance == 10

    @pytest.mark.asyncio
    async def test_invalid_settings_fall_back_to_defaults(self, storage, memory_store):
        memory_store.data[storage.keys.USER_SETTINGS] = json.dumps({"preferred_language": "de"})
        assert await storage.load_settings() == AppSettings()

    @pytest.mark.asyncio
    async def test_invalid_keys_dropped_valid_keys_kept(self, storage, memory_store):
        memory_store.data[storage.keys.USER_SETTINGS] = json.dumps({
            "preferred_language": "fr",
            "max_search_distance": 25,
            "enable_notifications": False,
        })

        loaded = await storage.load_settings()
        assert loaded.preferred_language == Language.BG
        assert loaded.max_search_distance == 25
        assert loaded.enable_notifications is False

    @pytest.mark.asyncio
    async def test_read_failure_gives_defaults(self, failing_storage):
        assert await failing_storage.load_settings() == AppSettings()

    @pytest.mark.asyncio
    async def test_write_failure_raises(self, failing_storage):
        with pytest.raises(StorageWriteError):
            await failing_storage.save_settings(AppSettings())


class TestEmergencyContacts:
    @pytest.mark.asyncio
    async def test_round_trip(self, storage):
        contacts = [
            EmergencyContact(id="1", name="Иван", phone="112", relationship="брат"),
            EmergencyContact(id="2", name="Мария", phone="0888123456", relationship="съпруга"),
        ]
        await storage.save_emergency_contacts(contacts)
        assert await storage.load_emergency_contacts() == contacts

    @pytest.mark.asyncio
    async def test_corrupted_contacts(self, storage, memory_store):
        memory_store.data[storage.keys.EMERGENCY_CONTACTS] = json.dumps([{"id": "1"}])
        assert await storage.load_emergency_contacts() == []


class TestSearchHistory:
    @pytest.mark.asyncio
    async def test_newest_first_without_duplicates(self, storage):
        for term in ["София", "Пловдив", "Варна", "София"]:
            await storage.add_search_term(term)

        assert await storage.load_search_history() == ["София", "Варна", "Пловдив"]

    @pytest.mark.asyncio
    async def test_capped_at_twenty(self, storage):
        for index in range(25):
            await storage.add_search_term(f"term {index}")

        history = await storage.load_search_history()
        assert len(history) == 20
        assert history[0] == "term 24"
        assert history[-1] == "term 5"

    @pytest.mark.asyncio
    async def test_clear(self, storage, memory_store):
        await storage.add_search_term("София")
        await storage.clear_search_history()

        assert await storage.load_search_history() == []
        assert storage.keys.SEARCH_HISTORY not in memory_store.data

    @pytest.mark.asyncio
    async def test_write_failure_raises(self, make_failing_store):
        storage = ShelterStorage(make_failing_store(fail_reads=False, fail_writes=True))
        with pytest.raises(StorageWriteError):
            await storage.add_search_term("София")


class TestFavorites:
    @pytest.mark.asyncio
    async def test_add_is_idempotent(self, storage):
        await storage.add_favorite("1")
        await storage.add_favorite("2")
        await storage.add_favorite("1")

        assert await storage.load_favorites() == ["1", "2"]
        assert await storage.is_favorite("1")
        assert not await storage.is_favorite("3")

    @pytest.mark.asyncio
    async def test_remove_is_idempotent(self, storage):
        await storage.add_favorite("1")
        await storage.add_favorite("2")
        await storage.remove_favorite("1")
        await storage.remove_favorite("1")

        assert await storage.load_favorites() == ["2"]

    @pytest.mark.asyncio
    async def test_read_failure_is_empty(self, failing_storage):
        assert await failing_storage.load_favorites() == []
        assert await failing_storage.is_favorite("1") is False


class TestLastLocation:
    @pytest.mark.asyncio
    async def test_round_trip(self, storage, sofia_center):
        await storage.save_last_location(sofia_center)
        assert await storage.load_last_location() == sofia_center

    @pytest.mark.asyncio
    async def test_expires_after_an_hour(self, storage, memory_store):
        memory_store.data[storage.keys.LAST_LOCATION] = json.dumps({
            "latitude": 42.7,
            "longitude": 23.3,
            "timestamp": _ms_ago(timedelta(hours=2)),
        })
        assert await storage.load_last_location() is None

    @pytest.mark.asyncio
    async def test_absent(self, storage):
        assert await storage.load_last_location() is None


class TestUtility:
    @pytest.mark.asyncio
    async def test_clear_all_data_keeps_foreign_keys(self, storage, memory_store, sample_shelters):
        memory_store.data["@OtherApp:token"] = "secret"
        await storage.save_shelter_set(sample_shelters)
        await storage.save_settings(AppSettings())
        await storage.add_favorite("1")
        await storage.add_search_term("София")

        await storage.clear_all_data()

        assert memory_store.data == {"@OtherApp:token": "secret"}
        assert await storage.load_shelter_set() == []

    @pytest.mark.asyncio
    async def test_clear_all_data_failure_raises(self, failing_storage):
        with pytest.raises(StorageWriteError):
            await failing_storage.clear_all_data()

    @pytest.mark.asyncio
    async def test_footprint_counts_utf8_bytes_in_namespace(self):
        store = MemoryKeyValueStore({
            "@ShelterFinder:searchHistory": "абв",
            "@ShelterFinder:favoriteShelters": "abc",
            "@OtherApp:token": "ignored",
        })
        storage = ShelterStorage(store, namespace="@ShelterFinder:")

        assert await storage.storage_footprint_bytes() == 9

    @pytest.mark.asyncio
    async def test_footprint_read_failure_is_zero(self, failing_storage):
        assert await failing_storage.storage_footprint_bytes() == 0


@pytest.mark.asyncio
async def test_namespaces_are_isolated(memory_store, sample_shelters):
    first = ShelterStorage(memory_store, namespace="@First:")
    second = ShelterStorage(memory_store, namespace="@Second:")

    await first.save_shelter_set(sample_shelters)

    assert await second.load_shelter_set() == []
    assert len(await first.load_shelter_set()) == len(sample_shelters)


@pytest.mark.asyncio
async def test_saved_coordinates_survive(storage):
    location = Coordinates(latitude=-33.8688, longitude=151.2093)
    await storage.save_last_location(location)
    assert await storage.load_last_location() == location
