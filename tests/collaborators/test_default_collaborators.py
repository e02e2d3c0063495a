# tests/collaborators/test_default_collaborators.py
"""
Testes da montagem dos colaboradores padrão a partir da configuração.
"""

from pages_flow.collaborators import (
    ArtifactDownloader,
    BookCompiler,
    Collaborators,
    Deployer,
    DirectoryDeployer,
    GitHubArtifactDownloader,
    JekyllGenerator,
    MdBookCompiler,
    Packager,
    SiteGenerator,
    TarPackager,
)
from pages_flow.core.config import deep_merge


def test_default_collaborators_follow_config(publication_config, tmp_path):
    cfg = deep_merge(
        publication_config,
        {
            "github": {"repository": "verus-lang/verus", "token": "abc", "retry": {"attempts": 5}},
            "tools": {"jekyll": {"command": ["bundle", "exec", "jekyll"]}},
            "deploy": {"base_url": "https://verus-lang.github.io/verus/"},
        },
    )
    c = Collaborators.default(cfg)

    assert isinstance(c.book_compiler, MdBookCompiler)
    assert c.book_compiler.executable == "mdbook"
    assert isinstance(c.artifact_downloader, GitHubArtifactDownloader)
    assert c.artifact_downloader.repository == "verus-lang/verus"
    assert c.artifact_downloader.token == "abc"
    assert c.artifact_downloader.retry.attempts == 5
    assert isinstance(c.site_generator, JekyllGenerator)
    assert c.site_generator.command == ["bundle", "exec", "jekyll"]
    assert isinstance(c.packager, TarPackager)
    assert c.packager.output_dir == tmp_path / ".pages_flow/bundle"
    assert isinstance(c.deployer, DirectoryDeployer)
    assert c.deployer.target_dir == tmp_path / ".pages_flow/published"
    assert c.deployer.base_url == "https://verus-lang.github.io/verus/"


def test_default_collaborators_satisfy_protocols(publication_config):
    c = Collaborators.default(publication_config)

    assert isinstance(c.book_compiler, BookCompiler)
    assert isinstance(c.artifact_downloader, ArtifactDownloader)
    assert isinstance(c.site_generator, SiteGenerator)
    assert isinstance(c.packager, Packager)
    assert isinstance(c.deployer, Deployer)


def test_tool_timeouts_come_from_config(publication_config):
    cfg = deep_merge(
        publication_config,
        {"tools": {"mdbook": {"timeout_s": 120}, "jekyll": {"timeout_s": 300}}},
    )
    c = Collaborators.default(cfg)

    assert c.book_compiler.timeout_s == 120.0
    assert c.site_generator.timeout_s == 300.0


def test_packaged_defaults_bound_tool_runs(publication_config):
    c = Collaborators.default(publication_config)

    assert c.book_compiler.timeout_s == 900.0
    assert c.site_generator.timeout_s == 900.0
