"""Tests for the workbench session."""

import pytest

from evallab.adapters.fixture_adapter import FixtureDataSource
from evallab.adapters.http_adapter import HttpDataSource
from evallab.config import Settings
from evallab.errors import InvalidInput
from evallab.models import Status
from evallab.workbench import Workbench
from evallab.workbench.session import create_data_source, create_workbench


class TestWorkbench:
    """Tests for the composed session."""

    @pytest.mark.asyncio
    async def test_start_loads_everything(self, workbench):
        await workbench.start()

        assert workbench.catalog.loaded
        assert len(workbench.catalog.models) == 6
        assert len(workbench.repository) == 4

    @pytest.mark.asyncio
    async def test_start_survives_unavailable_catalog(self, workbench, fake_source):
        fake_source.fail_catalogs = True

        await workbench.start()

        assert workbench.catalog.projects == []
        assert len(workbench.repository) == 4
        # Unknown project names degrade instead of failing
        view = await workbench.select("eval-1")
        assert view.project_name == "Unknown Project"

    @pytest.mark.asyncio
    async def test_run_selected(self, workbench):
        await workbench.start()
        await workbench.select("eval-3")

        evaluation = await workbench.run_selected("Review code.", "x = 1")

        assert evaluation.status == Status.PASSED
        assert workbench.selection.current().evaluation.output == "out:Review code.:x = 1"

    @pytest.mark.asyncio
    async def test_run_selected_without_selection(self, workbench, fake_source):
        await workbench.start()

        with pytest.raises(InvalidInput):
            await workbench.run_selected("p", "u")

        assert fake_source.run_calls == []

    @pytest.mark.asyncio
    async def test_compare(self, workbench):
        await workbench.start()

        report = await workbench.compare(["gpt-4", "claude-3"], "p", "u")

        assert [r.model_id for r in report.results] == ["gpt-4", "claude-3"]

    @pytest.mark.asyncio
    async def test_close(self, workbench, fake_source):
        await workbench.close()
        assert fake_source.closed

    @pytest.mark.asyncio
    async def test_fixture_backed_session(self, fixture_source):
        workbench = Workbench(fixture_source)
        await workbench.start()

        view = await workbench.select("eval-1")

        assert view.project_name == "Support Bot"
        assert view.passed_count == 1
        assert view.judge_score.overall == 8.5


class TestFactories:
    """Tests for building sessions from settings."""

    def test_fixture_source_by_default(self, fixture_file):
        source = create_data_source(Settings(fixture_path=str(fixture_file)))
        assert isinstance(source, FixtureDataSource)

    @pytest.mark.asyncio
    async def test_http_source(self):
        source = create_data_source(Settings(data_source="http", api_base_url="http://backend/api"))
        assert isinstance(source, HttpDataSource)
        await source.close()

    def test_create_workbench_passes_timeout(self, fixture_file):
        workbench = create_workbench(
            Settings(fixture_path=str(fixture_file), fetch_timeout_seconds=3.0)
        )
        assert workbench.runner.timeout == 3.0
        assert workbench.repository.timeout == 3.0
