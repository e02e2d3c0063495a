# tests/collaborators/test_packaging_and_deploy.py
"""
Testes do TarPackager (bundle determinístico) e do DirectoryDeployer.
"""

import tarfile
from pathlib import Path

import pytest

from pages_flow.collaborators.deploy import DirectoryDeployer
from pages_flow.collaborators.packaging import TarPackager
from pages_flow.collaborators.types import BundleHandle
from pages_flow.core.exceptions import DeployFailedError, PackagePathMissingError


def _tree(root: Path) -> Path:
    for sub in ["guide", "state_machines", "verusdoc", "publications-and-projects", "verus"]:
        (root / sub).mkdir(parents=True)
        (root / sub / "index.html").write_text(f"<h1>{sub}</h1>", encoding="utf-8")
    (root / "guide" / "ch1").mkdir()
    (root / "guide" / "ch1" / "intro.html").write_text("intro", encoding="utf-8")
    return root


def test_package_produces_handle(tmp_path: Path):
    root = _tree(tmp_path / "_site")
    bundle = TarPackager(output_dir=tmp_path / "bundle").package(root)

    assert bundle.path == tmp_path / "bundle" / "artifact.tar.gz"
    assert bundle.path.exists()
    assert bundle.root == root
    assert bundle.file_count == 6
    assert bundle.bytes == bundle.path.stat().st_size
    assert len(bundle.sha256) == 64
    assert bundle.entries == ("guide", "publications-and-projects", "state_machines", "verus", "verusdoc")

    with tarfile.open(bundle.path, "r:gz") as tar:
        names = tar.getnames()
        assert names == sorted(names)
        assert "guide/ch1/intro.html" in names
        assert all(m.mtime == 0 for m in tar.getmembers())


def test_package_is_deterministic(tmp_path: Path):
    root = _tree(tmp_path / "_site")
    a = TarPackager(output_dir=tmp_path / "a").package(root)
    b = TarPackager(output_dir=tmp_path / "b").package(root)

    assert a.sha256 == b.sha256


def test_bundle_inside_root_is_not_packaged_into_itself(tmp_path: Path):
    root = _tree(tmp_path / "_site")
    bundle = TarPackager(output_dir=root).package(root)

    with tarfile.open(bundle.path, "r:gz") as tar:
        assert "artifact.tar.gz" not in tar.getnames()


def test_package_missing_root_raises(tmp_path: Path):
    with pytest.raises(PackagePathMissingError):
        TarPackager(output_dir=tmp_path / "bundle").package(tmp_path / "missing")


def test_directory_deployer_publishes_tree(tmp_path: Path):
    root = _tree(tmp_path / "_site")
    bundle = TarPackager(output_dir=tmp_path / "bundle").package(root)
    target = tmp_path / "published"
    target.mkdir()
    (target / "stale.html").write_text("old", encoding="utf-8")

    result = DirectoryDeployer(target_dir=target).deploy(bundle)

    assert result.succeeded
    assert result.url == target.resolve().as_uri()
    assert (target / "verus" / "index.html").read_text(encoding="utf-8") == "<h1>verus</h1>"
    assert (target / "guide" / "ch1" / "intro.html").exists()
    assert not (target / "stale.html").exists()


def test_directory_deployer_uses_base_url(tmp_path: Path):
    root = _tree(tmp_path / "_site")
    bundle = TarPackager(output_dir=tmp_path / "bundle").package(root)

    result = DirectoryDeployer(target_dir=tmp_path / "pub", base_url="https://docs.example.test/").deploy(bundle)
    assert result.url == "https://docs.example.test/"


def test_directory_deployer_missing_bundle(tmp_path: Path):
    handle = BundleHandle(path=tmp_path / "nope.tar.gz", root=tmp_path, sha256="0" * 64, bytes=0, file_count=0)
    with pytest.raises(DeployFailedError):
        DirectoryDeployer(target_dir=tmp_path / "pub").deploy(handle)


def test_directory_deployer_rejects_unsafe_members(tmp_path: Path):
    evil = tmp_path / "evil.tar.gz"
    payload = tmp_path / "payload.txt"
    payload.write_text("x", encoding="utf-8")
    with tarfile.open(evil, "w:gz") as tar:
        tar.add(payload, arcname="../escape.txt")
    handle = BundleHandle(path=evil, root=tmp_path, sha256="0" * 64, bytes=evil.stat().st_size, file_count=1)

    with pytest.raises(DeployFailedError):
        DirectoryDeployer(target_dir=tmp_path / "pub").deploy(handle)
    assert not (tmp_path / "escape.txt").exists()
    assert not (tmp_path / "pub").exists()


def test_directory_deployer_rejects_symlink_members(tmp_path: Path):
    evil = tmp_path / "link.tar.gz"
    with tarfile.open(evil, "w:gz") as tar:
        info = tarfile.TarInfo("guide/index.html")
        info.type = tarfile.SYMTYPE
        info.linkname = "/etc/passwd"
        tar.addfile(info)
    handle = BundleHandle(path=evil, root=tmp_path, sha256="0" * 64, bytes=evil.stat().st_size, file_count=0)

    with pytest.raises(DeployFailedError) as exc:
        DirectoryDeployer(target_dir=tmp_path / "pub").deploy(handle)
    assert exc.value.details["member"] == "guide/index.html"
    assert not (tmp_path / "pub").exists()
    assert not (tmp_path / "pub.staging").exists()
