"""Unit tests for versioned form schema storage."""

from __future__ import annotations

from core.config import StorageConfig
from core.errors import ErrorCode
from store.memory_bucket import MemoryBucket
from store.schema_storage import SchemaStorageService, create_schema_storage_service


def _schema(**properties: str) -> dict[str, object]:
    fields = properties or {"name": "string", "email": "string"}
    return {
        "type": "object",
        "properties": {name: {"type": kind} for name, kind in fields.items()},
    }


def test_factory_creates_service() -> None:
    """Factory should build a schema service."""
    service = create_schema_storage_service(MemoryBucket(), StorageConfig(path_prefix="test-prefix"))

    assert isinstance(service, SchemaStorageService)


async def test_put_schema_increments_versions() -> None:
    """Repeated schema writes should produce versions 1, 2, 3."""
    service = SchemaStorageService(MemoryBucket())

    results = [await service.put_schema("guild-001", "form-001", _schema()) for _ in range(3)]

    assert [result.unwrap().version for result in results] == [1, 2, 3]
    assert results[-1].unwrap().key.endswith("v3.json")


async def test_put_schema_stores_description() -> None:
    """Schema descriptions should be returned with the version."""
    service = SchemaStorageService(MemoryBucket())
    await service.put_schema("guild-001", "form-001", _schema(), "Initial schema version")

    stored = (await service.get_schema("guild-001", "form-001", 1)).unwrap()

    assert stored.metadata.description == "Initial schema version"


async def test_put_schema_rejects_empty_ids() -> None:
    """Empty guild and form ids should fail naming the field."""
    service = SchemaStorageService(MemoryBucket())

    no_guild = await service.put_schema("", "form-001", _schema())
    no_form = await service.put_schema("guild-001", "", _schema())

    assert no_guild.error.code == ErrorCode.INVALID_KEY and "guildId" in no_guild.error.message
    assert no_form.error.code == ErrorCode.INVALID_KEY and "formId" in no_form.error.message


async def test_put_schema_rejects_non_object_schema(memory_bucket: MemoryBucket) -> None:
    """Schemas that are not JSON objects should fail without writing."""
    service = SchemaStorageService(memory_bucket)

    result = await service.put_schema("guild-001", "form-001", ["name"])

    assert not result.ok and result.error.code == ErrorCode.SERIALIZATION_ERROR
    assert memory_bucket.keys() == []


async def test_get_schema_returns_document_and_identity() -> None:
    """Stored schemas should come back with guild and form metadata."""
    service = SchemaStorageService(MemoryBucket())
    await service.put_schema("guild-001", "form-001", _schema(name="string"))

    stored = (await service.get_schema("guild-001", "form-001", 1)).unwrap()

    assert stored.schema == _schema(name="string")
    assert (stored.metadata.version, stored.metadata.guild_id, stored.metadata.form_id) == (
        1,
        "guild-001",
        "form-001",
    )


async def test_get_schema_missing_and_invalid_versions() -> None:
    """Missing versions and non-positive versions should fail distinctly."""
    service = SchemaStorageService(MemoryBucket())
    await service.put_schema("guild-001", "form-001", _schema())

    missing = await service.get_schema("guild-001", "form-001", 999)
    zero = await service.get_schema("guild-001", "form-001", 0)
    negative = await service.get_schema("guild-001", "form-001", -1)

    assert missing.error.code == ErrorCode.VERSION_NOT_FOUND
    assert zero.error.code == ErrorCode.INVALID_KEY and "version" in zero.error.message
    assert negative.error.code == ErrorCode.INVALID_KEY


async def test_get_current_schema_returns_latest() -> None:
    """Current schema should be the highest version."""
    service = SchemaStorageService(MemoryBucket())
    for literal in ("1", "2", "3"):
        await service.put_schema("guild-001", "form-001", {"type": "object", "const": literal})

    stored = (await service.get_current_schema("guild-001", "form-001")).unwrap()

    assert stored.metadata.version == 3
    assert stored.schema["const"] == "3"


async def test_get_current_schema_missing_form() -> None:
    """Forms without schemas should be SCHEMA_NOT_FOUND."""
    service = SchemaStorageService(MemoryBucket())

    result = await service.get_current_schema("guild-001", "no-schema")

    assert not result.ok and result.error.code == ErrorCode.SCHEMA_NOT_FOUND


async def test_list_versions_and_forms() -> None:
    """Version and form listings should reflect stored schemas."""
    service = SchemaStorageService(MemoryBucket())
    for _ in range(3):
        await service.put_schema("guild-001", "form-001", _schema())
    await service.put_schema("guild-001", "form-002", _schema())

    versions = (await service.list_versions("guild-001", "form-001")).unwrap()
    forms = (await service.list_forms("guild-001")).unwrap()

    assert [version.version for version in versions] == [1, 2, 3]
    assert all(version.size > 0 and version.etag for version in versions)
    assert [(form.form_id, form.current_version) for form in forms] == [
        ("form-001", 3),
        ("form-002", 1),
    ]


async def test_list_versions_empty_form() -> None:
    """Forms without schemas should list no versions."""
    service = SchemaStorageService(MemoryBucket())

    assert (await service.list_versions("guild-001", "no-versions")).unwrap() == []


async def test_exists_and_version_exists() -> None:
    """Probes should report presence without failing on absence."""
    service = SchemaStorageService(MemoryBucket())
    await service.put_schema("guild-001", "form-001", _schema())

    assert (await service.exists("guild-001", "form-001")).unwrap() is True
    assert (await service.exists("guild-001", "no-schema")).unwrap() is False
    assert (await service.version_exists("guild-001", "form-001", 1)).unwrap() is True
    assert (await service.version_exists("guild-001", "form-001", 99)).unwrap() is False


async def test_delete_version_and_all_versions() -> None:
    """Deletes should remove exactly the targeted versions."""
    service = SchemaStorageService(MemoryBucket())
    for _ in range(3):
        await service.put_schema("guild-001", "form-001", _schema())

    await service.delete_version("guild-001", "form-001", 1)
    remaining = await service.delete_all_versions("guild-001", "form-001")

    assert remaining.unwrap() == 2
    assert (await service.exists("guild-001", "form-001")).unwrap() is False
    assert (await service.delete_all_versions("guild-001", "form-001")).unwrap() == 0


async def test_delete_version_rejects_invalid_version() -> None:
    """Deleting version 0 should be INVALID_KEY."""
    service = SchemaStorageService(MemoryBucket())

    result = await service.delete_version("guild-001", "form-001", 0)

    assert not result.ok and result.error.code == ErrorCode.INVALID_KEY


async def test_path_prefix_prepended_to_keys(memory_bucket: MemoryBucket) -> None:
    """Prefixed services should write only under their prefix."""
    service = SchemaStorageService(memory_bucket, StorageConfig(path_prefix="prod"))
    await service.put_schema("guild-001", "form-001", _schema())

    listed = await memory_bucket.list("prod/")

    assert len(listed) == 1 and listed[0].key.startswith("prod/schemas/")


async def test_version_counters_isolated_per_form_and_guild() -> None:
    """Counters should be scoped to one guild and form."""
    service = SchemaStorageService(MemoryBucket())
    for _ in range(3):
        await service.put_schema("guild-001", "form-001", _schema())

    other_form = await service.put_schema("guild-001", "form-002", _schema())
    other_guild = await service.put_schema("guild-002", "form-001", _schema())

    assert other_form.unwrap().version == 1
    assert other_guild.unwrap().version == 1
