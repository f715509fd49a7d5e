"""
Shared fixtures.

`package_factory` writes throwaway packages to disk (or into a zip archive)
and puts them on `sys.path`; the imported modules are dropped from
`sys.modules` afterwards so every test scans fresh code.
"""

import importlib
import sys
import textwrap
import zipfile

import pytest
from easyioc.config.settings import Settings
from easyioc.context import bean_factory
from easyioc.context.application_context import ApplicationContext


class PackageFactory:
    """Creates importable packages from `{relative path: source}` maps."""

    def __init__(self, root, monkeypatch):
        self.root = root
        self.monkeypatch = monkeypatch
        self.packages = []

    def directory(self, name, files):
        """Write the package as a plain directory tree."""
        base = self.root / 'dirs'
        for relative, source in files.items():
            path = base / name / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(source))
        return self._install(name, base)

    def archive(self, name, files):
        """Write the package into a zip archive."""
        archive = self.root / f"{name}.zip"
        with zipfile.ZipFile(archive, 'w') as zf:
            for relative, source in files.items():
                zf.writestr(f"{name}/{relative}", textwrap.dedent(source))
        return self._install(name, archive)

    def _install(self, name, location):
        if str(location) not in sys.path:
            self.monkeypatch.syspath_prepend(str(location))
        importlib.invalidate_caches()
        self.packages.append(name)
        return name

    def cleanup(self):
        for name in self.packages:
            for module_name in list(sys.modules):
                if module_name == name or module_name.startswith(f"{name}."):
                    del sys.modules[module_name]


@pytest.fixture
def package_factory(tmp_path, monkeypatch):
    factory = PackageFactory(tmp_path, monkeypatch)
    yield factory
    factory.cleanup()


@pytest.fixture
def context():
    ctx = ApplicationContext(settings=Settings())
    yield ctx
    ctx.clear()


@pytest.fixture(autouse=True)
def reset_global_context():
    yield
    bean_factory.set_context(None)
