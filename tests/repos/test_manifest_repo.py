import pytest

from blogbuild.repos.manifest_repo import ManifestRepo
from blogbuild.schemas.post import BuildManifest
from tests.conftest import make_entry, make_rejection


def test_load_returns_none_before_first_build(tmp_path):
    assert ManifestRepo(tmp_path / "public").load() is None


def test_save_and_load_manifest(tmp_path):
    repo = ManifestRepo(tmp_path / "public")
    manifest = BuildManifest(
        posts=[make_entry("hello")], rejected=[make_rejection("bad.md")]
    )

    path = repo.save(manifest)

    assert path == tmp_path / "public" / "manifest.json"
    assert repo.load() == manifest


def test_load_corrupt_manifest_returns_none(tmp_path):
    repo = ManifestRepo(tmp_path)
    (tmp_path / "manifest.json").write_text("{not json")

    assert repo.load() is None


def test_write_and_read_page(tmp_path):
    repo = ManifestRepo(tmp_path)

    repo.write_page("aws/route53/index.html", "<p>hi</p>")

    assert repo.read_page("aws/route53/index.html") == "<p>hi</p>"
    assert repo.read_page("missing/index.html") is None


def test_read_page_refuses_paths_outside_output(tmp_path):
    (tmp_path / "secret.txt").write_text("secret")
    repo = ManifestRepo(tmp_path / "public")

    assert repo.read_page("../secret.txt") is None


@pytest.mark.parametrize("relative", ["/index.html", "../escape.html", ""])
def test_write_page_refuses_paths_outside_output(tmp_path, relative):
    repo = ManifestRepo(tmp_path / "public")

    with pytest.raises(ValueError):
        repo.write_page(relative, "<p>nope</p>")

    assert not (tmp_path / "escape.html").exists()
