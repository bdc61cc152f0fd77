"""Process log, per-file log, batch report and error log tests."""

import yaml
from loguru import logger

from hevc_batch.services.logging_service import BatchLogs, BatchReport, ErrorLog, JobLog, setup_logging


class TestSetupLogging:
    def test_process_log_file_created(self, tmp_path):
        log_dir = tmp_path / "logs"

        path = setup_logging(log_dir)
        logger.info("hello from the process log")

        assert path.parent == log_dir
        assert path.name.startswith("process_")
        assert "hello from the process log" in path.read_text(encoding="utf-8")


class TestJobLog:
    """Test the per-file sink and its section indentation."""

    def test_lines_written_with_sections(self, tmp_path):
        with JobLog(tmp_path, 7, "clip.mov") as job_log:
            job_log.info("start")
            with job_log.section("FILE COMPARISON"):
                job_log.info("Length difference: 0 seconds")
            job_log.info("end")

        lines = (tmp_path / "file_0007.log").read_text(encoding="utf-8").splitlines()
        messages = [line.split(" | ", 2)[2] for line in lines]
        assert messages == ["start", "FILE COMPARISON", "    Length difference: 0 seconds", "end"]

    def test_other_records_not_in_job_log(self, tmp_path):
        with JobLog(tmp_path, 0, "a.mov") as first, JobLog(tmp_path, 1, "b.mov") as second:
            first.info("first only")
            second.info("second only")
            logger.info("general message")

        first_text = (tmp_path / "file_0000.log").read_text(encoding="utf-8")
        assert "first only" in first_text
        assert "second only" not in first_text
        assert "general message" not in first_text

    def test_closed_log_stops_receiving(self, tmp_path):
        job_log = JobLog(tmp_path, 0, "a.mov")
        job_log.info("before close")
        job_log.close()
        job_log.info("after close")

        text = (tmp_path / "file_0000.log").read_text(encoding="utf-8")
        assert "before close" in text
        assert "after close" not in text

    def test_without_directory_no_file(self, tmp_path):
        job_log = JobLog(None, 0, "a.mov")
        job_log.warning("only in the process log")
        job_log.close()

        assert job_log.path is None
        assert list(tmp_path.iterdir()) == []


class TestBatchReport:
    def test_entries_are_indexed(self, tmp_path):
        report = BatchReport(tmp_path)
        report.write({"file_name": "a.mov", "verdict": "accepted"})
        report.write({"file_name": "b.mov", "verdict": "rejected"})

        assert report.log_file_path.name.startswith("report_")
        entries = yaml.safe_load(report.log_file_path.read_text(encoding="utf-8"))
        assert [e["index"] for e in entries] == [1, 2]
        assert entries[1]["verdict"] == "rejected"

    def test_non_dict_entry_ignored(self, tmp_path):
        report = BatchReport(tmp_path)
        report.write(["not", "a", "dict"])

        assert not report.log_file_path.exists()


class TestErrorLog:
    def test_entries_appended(self, tmp_path):
        error_log = ErrorLog(tmp_path)
        error_log.write("first abort", "details")
        error_log.write("second abort")
        error_log.write()

        text = (tmp_path / "error.txt").read_text(encoding="utf-8")
        assert text.count(ErrorLog.linesep_marker) == 2
        assert text.index("first abort") < text.index("second abort")


class TestBatchLogs:
    def test_layout(self, tmp_path):
        batch_logs = BatchLogs(tmp_path)

        with batch_logs.job_log(2, "clip.mov") as job_log:
            job_log.info("x")

        assert batch_logs.run_dir.parent == tmp_path.resolve()
        assert batch_logs.run_dir.name.startswith("batch_")
        assert (batch_logs.run_dir / "file_0002.log").is_file()
        assert batch_logs.error_log.log_file_path == tmp_path.resolve() / "error.txt"
