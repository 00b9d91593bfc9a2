"""Single repo card: mocked REST, avatar embedding, language bar.
Run: pytest -q
"""
import base64
import importlib
import json
import pathlib
import sys
from unittest.mock import patch

from lxml import etree

repo_root = pathlib.Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

SVG_NS = "{http://www.w3.org/2000/svg}"
XLINK_HREF = "{http://www.w3.org/1999/xlink}href"
AVATAR_URL = "https://avatars.example.com/u/1?v=4"
PNG = b"\x89PNG\r\n\x1a\nfake"

REPO_JSON = {
    "name": "statik-server",
    "description": "Self-hosted dev server with a mobile-first UI, tunnels and a built-in AI agent for quick edits on the go",
    "language": "TypeScript",
    "stargazers_count": 17,
    "forks_count": 3,
}
LANGS_JSON = {"TypeScript": 600, "Shell": 300, "Dockerfile": 100}


class FakeResp:
    def __init__(self, payload=None, status_code=200, content=b""):
        self.payload = payload
        self.status_code = status_code
        self.text = json.dumps(payload)
        self.content = content
    def json(self):
        return self.payload


def make_fake_get(avatar_ok=True):
    def fake_get(url, headers=None, timeout=40):
        if url == AVATAR_URL:
            return FakeResp(None, 200, PNG) if avatar_ok else FakeResp({"message": "gone"}, 404)
        if url.endswith("/languages"):
            return FakeResp(LANGS_JSON)
        if "/repos/" in url:
            return FakeResp(REPO_JSON)
        if "/users/" in url:
            return FakeResp({"login": "octo", "avatar_url": AVATAR_URL})
        return FakeResp({"message": "Not Found"}, 404)
    return fake_get


def load(monkeypatch, tmp_path):
    monkeypatch.setenv("PAT_GITHUB", "t0ken")
    monkeypatch.setenv("GH_USER", "octo")
    monkeypatch.setenv("SERVER_CARD_OUT", str(tmp_path / "card.svg"))
    importlib.reload(importlib.import_module("gh_api"))
    return importlib.reload(importlib.import_module("server_card"))


def test_offline_server_card(monkeypatch, tmp_path):
    server_card = load(monkeypatch, tmp_path)
    with patch("requests.get", side_effect=make_fake_get()) as get:
        assert server_card.main() == 0
    urls = [c.args[0] for c in get.call_args_list]
    assert "https://api.github.com/repos/octo/statik-server" in urls

    root = etree.fromstring((tmp_path / "card.svg").read_bytes())
    image = root.find(f"{SVG_NS}image")
    assert image.get(XLINK_HREF) == "data:image/png;base64," + base64.b64encode(PNG).decode("ascii")

    desc = [t for t in root.iter(f"{SVG_NS}text") if t.get("class") == "desc"]
    assert len(desc) >= 2
    assert " ".join(t.text for t in desc) == REPO_JSON["description"]

    bar = root.findall(f"{SVG_NS}g/{SVG_NS}rect")
    assert [r.get("fill") for r in bar] == ["#3178c6", "#89e051", "#ccc"]
    assert sum(float(r.get("width")) for r in bar) == 440


def test_avatar_failure_keeps_url(monkeypatch, tmp_path, capsys):
    server_card = load(monkeypatch, tmp_path)
    with patch("requests.get", side_effect=make_fake_get(avatar_ok=False)):
        assert server_card.main() == 0
    root = etree.fromstring((tmp_path / "card.svg").read_bytes())
    assert root.find(f"{SVG_NS}image").get(XLINK_HREF) == AVATAR_URL
    assert "[WARN]" in capsys.readouterr().out


def test_language_bar_empty(monkeypatch, tmp_path):
    server_card = load(monkeypatch, tmp_path)
    assert server_card.language_bar({}) == []
