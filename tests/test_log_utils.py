import json

from ui.log_utils import clear_logs, redact_url, write_cli_log, write_incoming_log


class TestRedactUrl:
    def test_masks_short_key(self):
        assert redact_url("https://upstream.example/v1/models?key=ABC") == (
            "https://upstream.example/v1/models?key=***"
        )

    def test_masks_long_token_partially(self):
        url = "https://upstream.example/v1?access_token=abcdefghijklmnop&alt=sse"

        assert redact_url(url) == "https://upstream.example/v1?access_token=abcdef...mnop&alt=sse"

    def test_leaves_other_params(self):
        url = "https://upstream.example/v1/models?pageSize=10&alt=json"

        assert redact_url(url) == url

    def test_no_query(self):
        assert redact_url("https://upstream.example/") == "https://upstream.example/"


def test_write_incoming_log_redacts(tmp_path):
    path = write_incoming_log(
        "POST",
        "https://upstream.example/v1/generate?key=ABC",
        {"x-goog-api-key": "AIzaSyExampleExample", "content-type": "application/json"},
        log_root=tmp_path,
    )

    payload = json.loads(path.read_text())
    assert path.parent == tmp_path / "incoming"
    assert payload["method"] == "POST"
    assert payload["target"] == "https://upstream.example/v1/generate?key=***"
    assert payload["headers"] == {
        "x-goog-api-key": "AIzaSy...mple",
        "content-type": "application/json",
    }


def test_write_cli_log_appends(tmp_path):
    log_file = tmp_path / "logs" / "proxy.log"

    write_cli_log("FORWARD", "https://upstream.example/", log_file=log_file, method="GET")
    write_cli_log("RESPONSE", "https://upstream.example/", log_file=log_file, status=200)

    lines = log_file.read_text().splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("FORWARD: https://upstream.example/ method=GET")
    assert lines[1].endswith("RESPONSE: https://upstream.example/ status=200")


def test_clear_logs(tmp_path):
    root = tmp_path / "logs"
    (root / "incoming").mkdir(parents=True)
    (root / "proxy.log").write_text("old\n")

    clear_logs(root)

    assert not root.exists()

