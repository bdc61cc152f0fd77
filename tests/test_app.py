"""Command-line entry point tests."""

from unittest.mock import patch

import pytest
import yaml

from hevc_batch import app
from hevc_batch.config.common import SETTINGS_ENV_VAR
from hevc_batch.domain.exceptions import ExternalToolException
from hevc_batch.domain.models import BatchSummary


@pytest.fixture
def settings_file(tmp_path, monkeypatch):
    (tmp_path / "input").mkdir()
    settings_path = tmp_path / "settings.yaml"
    settings_path.write_text(yaml.safe_dump({"source_folder": "input", "destination_folder": "output"}))
    monkeypatch.setenv(SETTINGS_ENV_VAR, str(settings_path))
    return settings_path


class TestMain:
    """Test exit codes with the tool check and the pipeline patched."""

    def test_completed_batch_exits_zero(self, settings_file):
        with patch("hevc_batch.app.verify_ffmpeg_tools"), patch.object(
            app.PipelineController, "run_batch", return_value=BatchSummary(accepted=2)
        ) as mock_run:
            assert app.main() == 0
        mock_run.assert_called_once()
        assert (settings_file.parent / "output").is_dir()
        assert any((settings_file.parent / "_logs").glob("process_*.log"))

    def test_aborted_batch_still_exits_zero(self, settings_file):
        summary = BatchSummary(accepted=1, aborted=1, completed=False)
        with patch("hevc_batch.app.verify_ffmpeg_tools"), patch.object(
            app.PipelineController, "run_batch", return_value=summary
        ):
            assert app.main() == 0

    def test_missing_tools_exit_one(self, settings_file):
        with patch("hevc_batch.app.verify_ffmpeg_tools", side_effect=ExternalToolException("ffmpeg missing")), patch.object(
            app.PipelineController, "run_batch"
        ) as mock_run:
            assert app.main() == 1
        mock_run.assert_not_called()

    def test_missing_source_folder_exits_one(self, tmp_path, monkeypatch):
        monkeypatch.setenv(SETTINGS_ENV_VAR, str(tmp_path / "settings.yaml"))

        with patch("hevc_batch.app.verify_ffmpeg_tools") as mock_verify:
            assert app.main() == 1

        assert (tmp_path / "settings.yaml").is_file()
        mock_verify.assert_not_called()

    def test_run_exits_with_main_status(self):
        with patch("hevc_batch.app.main", return_value=1):
            with pytest.raises(SystemExit) as exc_info:
                app.run()
        assert exc_info.value.code == 1
