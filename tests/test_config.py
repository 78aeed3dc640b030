from pathlib import Path

import pytest

from source_notes.config import load_site_configuration


def _write_config(tmp_path: Path, text: str) -> Path:
    config_path = tmp_path / "content.yaml"
    config_path.write_text(text, encoding="utf-8")
    return config_path


def test_relative_paths_resolve_against_config_directory(tmp_path):
    (tmp_path / "site" / "src" / "content" / "sources").mkdir(parents=True)
    config_path = _write_config(
        tmp_path,
        "root: site\ncollections:\n  sources: src/content/sources\n  posts: src/content/posts\n",
    )
    site = load_site_configuration(config_path)

    assert site.root == (tmp_path / "site").resolve()
    assert site.get("sources").path == (tmp_path / "site" / "src" / "content" / "sources").resolve()
    assert site.get("sources").exists is True
    assert site.get("posts").exists is False


def test_defaults(tmp_path):
    site = load_site_configuration(_write_config(tmp_path, "collections:\n  sources: sources\n"))
    assert site.dev_mode is False
    assert site.link_keys == ("spotify",)
    assert site.persistence.policy == "deferred"
    assert site.persistence.write_delay == pytest.approx(0.2)
    assert site.persistence.commit_delay == pytest.approx(3.0)
    assert site.persistence.auto_commit is True


def test_persistence_and_link_keys(tmp_path):
    config_path = _write_config(
        tmp_path,
        "dev_mode: true\n"
        "collections:\n  sources: sources\n"
        "notes:\n  link_keys: [spotify, youtube]\n"
        "persistence:\n  policy: synchronous\n  commit_delay: 0\n  auto_commit: false\n",
    )
    site = load_site_configuration(config_path)
    assert site.dev_mode is True
    assert site.link_keys == ("spotify", "youtube")
    assert site.persistence.deferred is False
    assert site.persistence.commit_delay == 0.0
    assert site.persistence.auto_commit is False


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_site_configuration(tmp_path / "nope.yaml")


@pytest.mark.parametrize(
    "text",
    [
        "collections:\n  posts: posts\n",
        "collections: {}\n",
        "- not\n- a mapping\n",
        "collections:\n  sources: sources\npersistence:\n  policy: eventually\n",
        "collections:\n  sources: sources\npersistence:\n  write_delay: -1\n",
        "collections:\n  sources: sources\nnotes:\n  link_keys: spotify\n",
        "collections:\n  sources: sources\nnotes:\n  link_keys: []\n",
    ],
)
def test_invalid_configuration(tmp_path, text):
    with pytest.raises(ValueError):
        load_site_configuration(_write_config(tmp_path, text))


def test_unknown_collection_lookup(tmp_path):
    site = load_site_configuration(_write_config(tmp_path, "collections:\n  sources: sources\n"))
    with pytest.raises(ValueError):
        site.get("drafts")
