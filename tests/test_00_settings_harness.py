import atexit
import glob
import os
import shutil
import tempfile
import unittest

from e2remote import config


_ORIG_DATA_DIR = str(config.DATA_DIR)
_ORIG_SETTINGS_FILE = str(config.SETTINGS_FILE)
_ORIG_LOG_FILE = str(config.LOG_FILE)
_TEST_DATA_DIR = tempfile.mkdtemp(prefix="e2remote-test-data-")
config.DATA_DIR = _TEST_DATA_DIR
config.SETTINGS_FILE = os.path.join(_TEST_DATA_DIR, os.path.basename(_ORIG_SETTINGS_FILE))
config.LOG_FILE = os.path.join(_TEST_DATA_DIR, os.path.basename(_ORIG_LOG_FILE))


def _cleanup_test_data() -> None:
    """Remove settings written during the run and restore real paths."""
    paths = [config.SETTINGS_FILE]
    paths.extend(glob.glob(config.SETTINGS_FILE + ".tmp-*"))
    for p in paths:
        try:
            if os.path.exists(p):
                os.remove(p)
        except Exception:
            pass

    shutil.rmtree(_TEST_DATA_DIR, ignore_errors=True)

    config.DATA_DIR = _ORIG_DATA_DIR
    config.SETTINGS_FILE = _ORIG_SETTINGS_FILE
    config.LOG_FILE = _ORIG_LOG_FILE


atexit.register(_cleanup_test_data)


class SettingsHarnessTests(unittest.TestCase):
    def test_settings_file_is_isolated_for_test_run(self):
        """Validate scenario: default-path SettingsStore writes land in a temp dir."""
        self.assertIn("e2remote-test-data-", str(config.SETTINGS_FILE))


if __name__ == "__main__":
    unittest.main()
