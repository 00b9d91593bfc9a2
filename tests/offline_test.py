"""
Offline test: mocks GitHub GraphQL responses so we can verify the repo
carousel SVG without real network calls.

Run:  pytest -q
"""
import json
from unittest.mock import patch
import pathlib
import importlib
import sys
from lxml import etree

repo_root = pathlib.Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

SVG_NS = "{http://www.w3.org/2000/svg}"
XLINK_HREF = "{http://www.w3.org/1999/xlink}href"

PINNED_JSON = {
    "data": {
        "user": {
            "pinnedItems": {
                "nodes": [
                    {"nameWithOwner": "octo/alpha", "name": "alpha", "isArchived": False},
                    {"nameWithOwner": "octo/old", "name": "old", "isArchived": True},
                    {"nameWithOwner": "octo/beta", "name": "beta", "isArchived": False},
                    {"nameWithOwner": "friend/gamma", "name": "gamma", "isArchived": False},
                ]
            }
        }
    }
}

TOP_JSON = {
    "data": {
        "user": {
            "repositories": {
                "nodes": [
                    {"nameWithOwner": "octo/starry", "name": "starry", "isArchived": False},
                    {"nameWithOwner": "octo/dusty", "name": "dusty", "isArchived": True},
                ]
            }
        }
    }
}


def repo_json(name, owner="octo"):
    if name == "missing":
        return {"data": {"repository": None}}
    langs = {
        "alpha": {"totalSize": 1000, "edges": [
            {"size": 900, "node": {"name": "Python", "color": "#3572A5"}},
            {"size": 100, "node": {"name": "Shell", "color": None}},
        ]},
        "beta": {"totalSize": 0, "edges": []},
    }.get(name, {"totalSize": 10, "edges": [{"size": 10, "node": {"name": "Go", "color": "#00ADD8"}}]})
    return {
        "data": {
            "repository": {
                "nameWithOwner": f"{owner}/{name}",
                "name": name,
                "description": "Tools & toys <for> profile cards " * (3 if name == "beta" else 1),
                "stargazerCount": 1234,
                "forkCount": 5,
                "primaryLanguage": {"name": "Rust", "color": "#dea584"} if name == "beta" else None,
                "languages": langs,
            }
        }
    }


def fake_post(url, json=None, headers=None, timeout=40):
    q = (json or {}).get("query", "")
    v = (json or {}).get("variables", {})
    if "pinnedItems" in q:
        return FakeResp(PINNED_JSON)
    if "orderBy: {field: STARGAZERS" in q:
        return FakeResp(TOP_JSON)
    if "repository(owner" in q:
        return FakeResp(repo_json(v["name"], v["owner"]))
    return FakeResp({"data": {}})


class FakeResp:
    def __init__(self, payload):
        self.payload = payload
        self.status_code = 200
        self.text = json.dumps(payload)
    def json(self):
        return self.payload


def load(monkeypatch, tmp_path, repos=""):
    monkeypatch.setenv("PAT_GITHUB", "t0ken")
    monkeypatch.setenv("GH_USER", "octo")
    monkeypatch.setenv("REPOS", repos)
    monkeypatch.setenv("REPO_SLIDE_OUT", str(tmp_path / "assets" / "repo-slide.svg"))
    gh_api = importlib.reload(importlib.import_module("gh_api"))
    repo_slide = importlib.reload(importlib.import_module("repo_slide"))
    return gh_api, repo_slide


@patch("requests.post", side_effect=fake_post)
def test_offline_repo_slide(mock_post, monkeypatch, tmp_path):
    gh_api, repo_slide = load(monkeypatch, tmp_path)

    assert repo_slide.main() == 0

    out = tmp_path / "assets" / "repo-slide.svg"
    root = etree.fromstring(out.read_bytes())
    slides = root.findall(f"{SVG_NS}g[@class='slide']")
    assert len(slides) == 2, "3 repos should make 2 pages"

    anims = root.findall(f".//{SVG_NS}animateTransform")
    assert [a.get("dur") for a in anims] == ["12s", "12s"]
    assert anims[0].get("keyTimes") == "0.0000;0.0000;0.1125;0.3875;0.5000;1.0000"
    assert anims[1].get("values") == "880;880;0;0;-880;-880"
    assert all(a.get("begin") == "0s" and a.get("repeatCount") == "indefinite" for a in anims)

    links = [a.get(XLINK_HREF) for a in root.iter(f"{SVG_NS}a")]
    assert links == ["https://github.com/octo/alpha", "https://github.com/octo/beta", "https://github.com/friend/gamma"]

    text = "".join(root.itertext())
    assert "Tools & toys <for> profile cards" in text
    assert "1,234" in text
    assert "Rust" in text, "primary language fallback missing"
    assert "octo/old" not in out.read_text(encoding="utf-8")


@patch("requests.post", side_effect=fake_post)
def test_explicit_repo_list_skips_missing(mock_post, monkeypatch, tmp_path):
    gh_api, repo_slide = load(monkeypatch, tmp_path, repos="alpha, missing, other/delta")

    assert repo_slide.main() == 0

    root = etree.fromstring((tmp_path / "assets" / "repo-slide.svg").read_bytes())
    links = [a.get(XLINK_HREF) for a in root.iter(f"{SVG_NS}a")]
    assert links == ["https://github.com/octo/alpha", "https://github.com/other/delta"]
    assert len(root.findall(f"{SVG_NS}g[@class='slide']")) == 1
    assert not any("pinnedItems" in c.kwargs["json"]["query"] for c in mock_post.call_args_list)


@patch("requests.post", side_effect=fake_post)
def test_falls_back_to_top_repos(mock_post, monkeypatch, tmp_path):
    gh_api, repo_slide = load(monkeypatch, tmp_path)
    one_pin = {"data": {"user": {"pinnedItems": {"nodes": [PINNED_JSON["data"]["user"]["pinnedItems"]["nodes"][0]]}}}}
    with patch("requests.post", side_effect=lambda url, json=None, headers=None, timeout=40:
               FakeResp(one_pin) if "pinnedItems" in json["query"] else fake_post(url, json, headers, timeout)):
        assert repo_slide.take_repos("octo") == [("octo", "starry")]


def test_missing_token(monkeypatch, tmp_path, capsys):
    gh_api, repo_slide = load(monkeypatch, tmp_path)
    monkeypatch.setattr(gh_api, "GH_TOKEN", None)
    assert repo_slide.main() == 1
    assert "PAT_GITHUB" in capsys.readouterr().err


def test_language_bar_widths_fill_bar(monkeypatch, tmp_path):
    gh_api, repo_slide = load(monkeypatch, tmp_path)
    widths = repo_slide.bar_widths([0.97, 0.02, 0.01], 380)
    assert sum(widths) == 380
    assert min(widths) >= round(0.04 / 1.05 * 380) - 1
    assert repo_slide.bar_widths([1], 380) == [380]


def test_parse_repo_list(monkeypatch, tmp_path):
    gh_api, repo_slide = load(monkeypatch, tmp_path)
    assert repo_slide.parse_repo_list(" a, b/c ,,", "me") == [("me", "a"), ("b", "c")]
