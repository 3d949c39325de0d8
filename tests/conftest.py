"""Pytest configuration and shared fixtures."""

import pytest

from tag_sync.clients.aws_client import AWSAPIError, DefaultTagsError
from tag_sync.models import Instance, Snapshot, SyncOptions, Volume
from tag_sync.models.tags import Tag
from tag_sync.services.backup_service import BackupService
from tag_sync.services.confirmation import StaticConfirmer
from tag_sync.services.propagation_pipeline import PropagationPipeline


# =============================================================================
# In-memory AWS stand-in
# =============================================================================

class FakeAWSClient:
    """
    In-memory stand-in for AWSClient.

    Holds instances, volumes and snapshots, applies create/delete tag calls
    to them, and records every call so tests can assert on what reached AWS.
    """

    def __init__(
        self,
        instances: list[Instance] | None = None,
        volumes: list[Volume] | None = None,
        snapshots: list[Snapshot] | None = None,
        default_tags: dict[str, str] | None = None,
    ):
        self.region = "us-east-1"
        self.instances = {i.instance_id: i.model_copy(deep=True) for i in instances or []}
        self.volumes = {v.volume_id: v.model_copy(deep=True) for v in volumes or []}
        self.snapshots = {s.snapshot_id: s.model_copy(deep=True) for s in snapshots or []}
        self.default_tags = default_tags
        self.create_calls: list[tuple[list[str], list[Tag]]] = []
        self.delete_calls: list[tuple[list[str], list[Tag]]] = []
        self.list_instances_calls = 0
        self.list_volumes_calls = 0

    def tags_of(self, resource_id: str) -> dict[str, str]:
        for store in (self.instances, self.volumes, self.snapshots):
            if resource_id in store:
                return store[resource_id].tags
        raise AWSAPIError(f"Resource {resource_id} not found", "InvalidID")

    async def list_instances(self) -> list[Instance]:
        self.list_instances_calls += 1
        return [i.model_copy(deep=True) for i in self.instances.values()]

    async def list_volumes(self) -> dict[str, Volume]:
        self.list_volumes_calls += 1
        return {k: v.model_copy(deep=True) for k, v in self.volumes.items()}

    async def list_snapshots(self) -> dict[str, Snapshot]:
        return {k: s.model_copy(deep=True) for k, s in self.snapshots.items()}

    async def get_default_tags(self, parameter_name: str) -> dict[str, str]:
        if not self.default_tags:
            raise DefaultTagsError(f"Parameter {parameter_name} not found or has no value")
        return dict(self.default_tags)

    async def create_tags(self, resource_ids: list[str], tags: list[Tag]) -> None:
        self.create_calls.append((list(resource_ids), list(tags)))
        for resource_id in resource_ids:
            self.tags_of(resource_id).update({tag.key: tag.value for tag in tags})

    async def delete_tags(self, resource_ids: list[str], tags: list[Tag]) -> None:
        self.delete_calls.append((list(resource_ids), list(tags)))
        for resource_id in resource_ids:
            current = self.tags_of(resource_id)
            for tag in tags:
                if current.get(tag.key) == tag.value:
                    del current[tag.key]


# =============================================================================
# Option Fixtures
# =============================================================================

@pytest.fixture
def live_options():
    """Options with every dry-run switched off and overwrite enabled."""
    return SyncOptions(
        overwrite_on_volume_from_instance=True,
        overwrite_on_instance_from_default=False,
        apply_default_tags_to_instances=True,
        delete_tags_from_instances=False,
        dry_run_instances=False,
        dry_run_volumes=False,
        dry_run_snapshots=False,
    )


@pytest.fixture
def dry_run_options():
    """Default options: everything dry-run."""
    return SyncOptions()


# =============================================================================
# Test Data Fixtures
# =============================================================================

@pytest.fixture
def sample_instances():
    """Two instances, one with two volumes and one without tags."""
    return [
        Instance(
            instance_id="i-web1",
            tags={"Name": "web1", "Env": "prod", "Team": "platform"},
            volume_ids=["vol-root1", "vol-data1"],
        ),
        Instance(instance_id="i-bare", tags={}, volume_ids=["vol-root2"]),
    ]


@pytest.fixture
def sample_volumes():
    return [
        Volume(volume_id="vol-root1", tags={"Env": "dev"}),
        Volume(volume_id="vol-data1", tags={}),
        Volume(volume_id="vol-root2", tags={}),
    ]


@pytest.fixture
def sample_snapshots():
    return [
        Snapshot(snapshot_id="snap-1", volume_id="vol-root1", tags={}),
        Snapshot(snapshot_id="snap-2", volume_id="vol-gone", tags={}),
    ]


@pytest.fixture
def fake_aws(sample_instances, sample_volumes, sample_snapshots):
    """A FakeAWSClient loaded with the sample resources and default tags."""
    return FakeAWSClient(
        instances=sample_instances,
        volumes=sample_volumes,
        snapshots=sample_snapshots,
        default_tags={"CostCenter": "1234", "Env": "staging"},
    )


@pytest.fixture
def fake_aws_factory():
    """The FakeAWSClient class, for tests that build their own resources."""
    return FakeAWSClient


@pytest.fixture
def backup_service(tmp_path):
    return BackupService(tmp_path / "backups")


@pytest.fixture
def make_pipeline(backup_service):
    """Build a pipeline around a client with a non-interactive confirmer."""

    def _make(aws_client, options, confirm: bool = True):
        return PropagationPipeline(
            aws_client=aws_client,
            options=options,
            backup_service=backup_service,
            confirmer=StaticConfirmer(confirm),
        )

    return _make


# =============================================================================
# Pytest Hooks
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "property: marks tests as property-based tests"
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "property" in str(item.fspath):
            item.add_marker(pytest.mark.property)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
