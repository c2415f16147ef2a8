"""Tests for static call-site discovery."""

from __future__ import annotations

import logging
import textwrap
from pathlib import Path

import pytest

from mezzofanti.errors import ScanUnitFailure
from mezzofanti.extraction.scanner import scan_file, scan_source


def _scan(source: str) -> list:
    registry = scan_source(textwrap.dedent(source), filename="app/views.py", module="app.views")
    return list(registry.export())


class TestImportForms:
    """Every way of importing the marker is recognized."""

    @pytest.mark.parametrize(
        ("header", "call"),
        [
            ("from mezzofanti import translate", "translate"),
            ("from mezzofanti import translate as _", "_"),
            ("from mezzofanti.translator import translate", "translate"),
            ("from mezzofanti import *", "translate"),
            ("import mezzofanti", "mezzofanti.translate"),
            ("import mezzofanti as m", "m.translate"),
            ("import mezzofanti.translator", "mezzofanti.translator.translate"),
        ],
    )
    def test_marker_recognized(self, header: str, call: str) -> None:
        """The call is found whatever the import style."""
        messages = _scan(f'{header}\n\n{call}("Hello")\n')
        assert [m.text for m in messages] == ["Hello"]

    def test_no_import_no_messages(self) -> None:
        """A local function named translate is not the marker."""
        source = """
            def translate(text):
                return text

            translate("Hello")
        """
        assert _scan(source) == []

    def test_relative_import_ignored(self) -> None:
        """Relative imports never bind the marker."""
        assert _scan('from .mezzofanti import translate\ntranslate("Hello")\n') == []

    def test_other_attribute_ignored(self) -> None:
        """Other functions of the module are not markers."""
        assert _scan('import mezzofanti\nmezzofanti.configure("Hello")\n') == []


class TestCallSites:
    """Fields synthesized from literal call sites."""

    def test_full_call(self) -> None:
        """Domain, context and comment literals are captured."""
        source = """
            from mezzofanti import translate

            def greet(name):
                return translate(
                    "Hello {name}!",
                    domain="ui",
                    context="greeting",
                    comment="Shown on login",
                    variables={"name": name},
                )
        """
        [message] = _scan(source)
        assert message.key == ("Hello {name}!", "ui", "greeting")
        assert message.comment == "Shown on login"
        assert message.variables == ("name",)
        [site] = message.provenance
        assert (site.file, site.line, site.module) == ("app/views.py", 5, "app.views")

    def test_defaults(self) -> None:
        """Omitted domain and context take their defaults."""
        [message] = _scan('from mezzofanti import translate\ntranslate("Hi")\n')
        assert (message.domain, message.context) == ("default", "")

    def test_text_keyword(self) -> None:
        """The text may be passed by keyword."""
        [message] = _scan('from mezzofanti import translate\ntranslate(text="Hi")\n')
        assert message.text == "Hi"

    def test_implicit_concatenation(self) -> None:
        """Adjacent string literals form one text."""
        source = """
            from mezzofanti import translate
            translate("Hello, "
                      "world")
        """
        [message] = _scan(source)
        assert message.text == "Hello, world"

    def test_nested_calls(self) -> None:
        """Markers nested inside other expressions are found."""
        source = """
            from mezzofanti import translate
            print(str(translate("Outer", variables={"x": translate("Inner")})))
        """
        assert sorted(m.text for m in _scan(source)) == ["Inner", "Outer"]

    def test_variables_from_dict_call(self) -> None:
        """variables=dict(a=..., b=...) declares a and b."""
        source = """
            from mezzofanti import translate
            translate("{a} {b}", variables=dict(b=1, a=2))
        """
        [message] = _scan(source)
        assert message.variables == ("b", "a")

    def test_variables_from_placeholders(self) -> None:
        """Without a literal mapping, variables are the template placeholders."""
        source = """
            from mezzofanti import translate
            translate("{count, plural, one {# file} other {# files}} in {folder}", variables=v)
        """
        [message] = _scan(source)
        assert message.variables == ("count", "folder")

    def test_repeated_call_sites_kept_separately(self) -> None:
        """Each call site of the same message is registered."""
        source = """
            from mezzofanti import translate
            translate("Save")
            translate("Save")
        """
        messages = _scan(source)
        assert len(messages) == 2
        assert messages[0].identity == messages[1].identity


class TestSkippedCalls:
    """Non-extractable calls are skipped with a warning."""

    @pytest.mark.parametrize(
        ("call", "reason"),
        [
            ("translate(text_var)", "text is not a string literal"),
            ('translate("a" + "b")', "text is not a string literal"),
            ('translate(f"Hi {name}")', "text is not a string literal"),
            ('translate("Hi", domain=dom)', "domain is not a string literal"),
            ('translate("Hi", context=ctx)', "context is not a string literal"),
            ('translate("Hi", **options)', "**kwargs"),
            ("translate()", "text is not a string literal"),
            ('translate("")', "text is empty"),
        ],
    )
    def test_skipped_with_warning(
        self, call: str, reason: str, caplog: pytest.LogCaptureFixture
    ) -> None:
        """The skip is logged with file and line."""
        with caplog.at_level(logging.WARNING, logger="mezzofanti.extraction.scanner"):
            messages = _scan(f"from mezzofanti import translate\n{call}\n")
        assert messages == []
        assert "app/views.py:2" in caplog.text
        assert reason in caplog.text

    def test_non_literal_comment_is_dropped(self) -> None:
        """A dynamic comment does not prevent extraction."""
        [message] = _scan('from mezzofanti import translate\ntranslate("Hi", comment=c)\n')
        assert message.comment == ""

    def test_malformed_template_still_extracted(self, caplog: pytest.LogCaptureFixture) -> None:
        """A template that does not parse is extracted without variables."""
        with caplog.at_level(logging.WARNING, logger="mezzofanti.extraction.scanner"):
            [message] = _scan('from mezzofanti import translate\ntranslate("Hi {name")\n')
        assert message.variables == ()
        assert "app/views.py:2" in caplog.text


class TestScanFailures:
    """Unit-level failures."""

    def test_syntax_error(self) -> None:
        """Unparseable source raises ScanUnitFailure naming the unit."""
        with pytest.raises(ScanUnitFailure) as exc_info:
            scan_source("def broken(:\n", filename="app/bad.py", module="app.bad")
        assert exc_info.value.unit == "app.bad"
        assert exc_info.value.path == "app/bad.py"
        assert "SyntaxError" in exc_info.value.reason

    def test_missing_file(self, tmp_path: Path) -> None:
        """An unreadable file raises ScanUnitFailure."""
        with pytest.raises(ScanUnitFailure, match="OSError|FileNotFoundError"):
            scan_file(tmp_path / "gone.py", root=tmp_path, module="gone")

    def test_undecodable_file(self, tmp_path: Path) -> None:
        """Non-UTF-8 source raises ScanUnitFailure."""
        path = tmp_path / "latin.py"
        path.write_bytes(b"x = '\xff\xfe\xfa'\n")
        with pytest.raises(ScanUnitFailure, match="UnicodeDecodeError"):
            scan_file(path, root=tmp_path, module="latin")


class TestScanFile:
    """File-level scanning."""

    def test_relative_provenance(self, tmp_path: Path) -> None:
        """Provenance records the posix path relative to the root."""
        path = tmp_path / "app" / "views.py"
        path.parent.mkdir()
        path.write_text('from mezzofanti import translate\ntranslate("Hi")\n', encoding="utf-8")
        registry = scan_file(path, root=tmp_path, module="app.views")
        [message] = registry.export()
        assert message.provenance[0].file == "app/views.py"
        assert registry.unit == "app.views"

    def test_outside_root_uses_absolute_path(self, tmp_path: Path) -> None:
        """Files outside the root keep their absolute path."""
        root = tmp_path / "project"
        root.mkdir()
        path = tmp_path / "lib.py"
        path.write_text('from mezzofanti import translate\ntranslate("Hi")\n', encoding="utf-8")
        [message] = scan_file(path, root=root, module="lib").export()
        assert message.provenance[0].file == path.resolve().as_posix()

    def test_byte_order_mark(self, tmp_path: Path) -> None:
        """A UTF-8 BOM is accepted."""
        path = tmp_path / "bom.py"
        path.write_bytes(
            b"\xef\xbb\xbffrom mezzofanti import translate\ntranslate('Caf\xc3\xa9')\n"
        )
        [message] = scan_file(path, root=tmp_path, module="bom").export()
        assert message.text == "Café"
