import logging
import unittest

from utils import logging_utils
from utils.logging_utils import build_logging_config, get_tagged_logger, mask_url_secrets


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        self.records.append(record)


class TestLoggingUtils(unittest.TestCase):
    def test_build_logging_config_has_expected_handlers_and_filters(self):
        cfg = build_logging_config(job_name="weatherapp-test")
        self.assertIn("stdout", cfg["handlers"])
        self.assertIn("stderr", cfg["handlers"])
        self.assertEqual(cfg["filters"]["job_name"]["job_name"], "weatherapp-test")
        self.assertEqual(cfg["handlers"]["stderr"]["level"], "WARNING")

    def test_get_tagged_logger_injects_tag(self):
        handler = _ListHandler()
        logger = get_tagged_logger("weatherapp.parsing", tag="parsing")
        base_logger = logger.logger
        base_logger.setLevel(logging.DEBUG)
        base_logger.addHandler(handler)
        base_logger.propagate = False
        try:
            logger.info("hello")
            self.assertEqual(handler.records[-1].tag, "parsing")
        finally:
            base_logger.removeHandler(handler)
            base_logger.propagate = True

    def test_get_tagged_logger_defaults_tag_to_last_segment(self):
        logger = get_tagged_logger("weatherapp.data_sources.geocoding")
        self.assertEqual(logger.extra["tag"], "geocoding")

    def test_setup_logging_override_applies_filters(self):
        root = logging.getLogger()
        orig_handlers = root.handlers[:]
        orig_level = root.level
        try:
            logging_utils.setup_logging(level="INFO", job_name="weatherapp-test", override_existing=True)
            self.assertTrue(
                any(
                    any(f.__class__.__name__ == "JobNameFilter" for f in h.filters)
                    for h in root.handlers
                )
            )
        finally:
            root.handlers = orig_handlers
            root.setLevel(orig_level)
            logging_utils._CONFIGURED = False


class TestMaskUrlSecrets(unittest.TestCase):
    def test_masks_appid(self):
        url = "https://api.openweathermap.org/data/2.5/weather?lat=61.5&lon=23.8&appid=abc123"
        masked = mask_url_secrets(url)
        self.assertNotIn("abc123", masked)
        self.assertIn("lat=61.5", masked)
        self.assertIn("appid=%2A%2A%2A", masked)

    def test_leaves_urls_without_query(self):
        url = "https://nominatim.openstreetmap.org/search"
        self.assertEqual(mask_url_secrets(url), url)

    def test_keeps_non_sensitive_params(self):
        url = "https://nominatim.openstreetmap.org/search?q=Tampere&format=json"
        self.assertEqual(mask_url_secrets(url), url)


if __name__ == "__main__":
    unittest.main()
