import unittest

from e2remote import protocol
from e2remote.errors import InvalidAddress


class ProtocolBehaviorTests(unittest.TestCase):
    def test_endpoint_urls_match_openwebif_templates(self):
        """Validate scenario: URL builders should produce the fixed OpenWebif endpoints."""
        self.assertEqual(protocol.about_url("10.0.0.5"), "http://10.0.0.5/web/about")
        self.assertEqual(
            protocol.remote_control_url("10.0.0.5", 115),
            "http://10.0.0.5/web/remotecontrol?command=115",
        )
        self.assertEqual(
            protocol.power_state_url("10.0.0.5", protocol.PowerState.STANDBY),
            "http://10.0.0.5/web/powerstate?newstate=0",
        )

    def test_grab_url_selects_resolution(self):
        """Validate scenario: HD uses mode=all, SD asks for 720 lines."""
        self.assertEqual(protocol.grab_url("10.0.0.5", False), "http://10.0.0.5/grab?format=jpg&r=720")
        self.assertEqual(protocol.grab_url("10.0.0.5", True), "http://10.0.0.5/grab?format=jpg&mode=all")

    def test_empty_and_malformed_addresses_raise_invalid_address(self):
        """Validate scenario: empty or unbuildable addresses are rejected before any request."""
        for bad in ("", "   ", None, "10.0.0.5/web", "box name", "user@10.0.0.5"):
            with self.subTest(address=bad):
                with self.assertRaises(InvalidAddress):
                    protocol.about_url(bad)

    def test_normalize_address_strips_whitespace(self):
        """Validate scenario: surrounding whitespace from text input is ignored."""
        self.assertEqual(protocol.normalize_address("  192.168.1.20 "), "192.168.1.20")
        self.assertEqual(protocol.normalize_address("box.local:8080"), "box.local:8080")

    def test_digit_keys_map_to_100_through_109(self):
        """Validate scenario: numeric keypad digits map onto codes 100-109."""
        for d in range(10):
            self.assertEqual(int(protocol.digit_key(d)), 100 + d)
        with self.assertRaises(ValueError):
            protocol.digit_key(10)

    def test_key_code_resolves_names(self):
        """Validate scenario: button names resolve to their fixed codes."""
        self.assertEqual(protocol.key_code("volume_up"), 115)
        self.assertEqual(protocol.key_code("VOLUME_DOWN"), 114)
        self.assertEqual(protocol.key_code("channel_up"), 402)
        self.assertEqual(protocol.key_code("channel_down"), 403)
        self.assertEqual(protocol.key_code("red"), 398)
        self.assertEqual(protocol.key_code("left"), 105)
        self.assertEqual(protocol.key_code("7"), 107)
        self.assertEqual(protocol.key_code("power"), 116)
        with self.assertRaises(ValueError):
            protocol.key_code("teleport")

    def test_is_common_request_flags_probe_and_grab(self):
        """Validate scenario: probe and grab traffic are the "common" requests."""
        self.assertTrue(protocol.is_common_request("http://10.0.0.5/web/about"))
        self.assertTrue(protocol.is_common_request("http://10.0.0.5/grab?format=jpg&r=720"))
        self.assertFalse(protocol.is_common_request("http://10.0.0.5/web/remotecontrol?command=115"))


if __name__ == "__main__":
    unittest.main()
