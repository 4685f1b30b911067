import logging

from catalogue_builder.logging_utils import LOG_FORMAT, _catalogue_handlers


def test_console_only_without_log_file():
    handlers = _catalogue_handlers(None)
    assert [type(h) for h in handlers] == [logging.StreamHandler]


def test_file_sink_receives_formatted_records(tmp_path):
    log_file = tmp_path / "jobs.log"
    handlers = _catalogue_handlers(str(log_file))
    file_handler = handlers[1]
    try:
        assert isinstance(file_handler, logging.FileHandler)
        assert all(h.formatter._fmt == LOG_FORMAT for h in handlers)
        record = logging.LogRecord("catalogue_builder.jobs", logging.INFO, __file__, 1, "PDF sent to %s", ("a@b.test",), None)
        file_handler.emit(record)
    finally:
        file_handler.close()
    assert "[INFO] catalogue_builder.jobs: PDF sent to a@b.test" in log_file.read_text(encoding="utf-8")
