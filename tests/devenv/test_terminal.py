"""
Tests for devenv.terminal module.
"""

import io

import pytest

from devenv.requirements import InfoGroup, InfoItem
from devenv.terminal import Colors, LinePrinter, strip_ansi, visible_length


class TestVisibleLength:
    """Tests for visible_length and strip_ansi."""

    def test_empty_string(self):
        """Test empty string has length 0."""
        assert visible_length("") == 0

    def test_plain_ascii(self):
        """Test ANSI-free text counts characters."""
        assert visible_length("hello world") == 11

    def test_unicode_counts_code_points(self):
        """Test box drawing and glyphs count as one character each."""
        assert visible_length("✓ ok") == 4
        assert visible_length("┌──┐") == 4

    def test_color_codes_ignored(self):
        """Test prepended color codes do not count."""
        text = "Setup complete"
        assert visible_length(f"{Colors.RED}{text}") == len(text)
        assert visible_length(f"{Colors.GRAY}{Colors.GREEN}{text}{Colors.ENDC}") == len(text)

    def test_strip_ansi_removes_osc_hyperlinks(self):
        """Test OSC sequences are stripped too."""
        text = "\x1b]8;;https://example.com\x07link\x1b]8;;\x07"
        assert strip_ansi(text) == "link"


class TestPrintPadded:
    """Tests for LinePrinter.print_padded."""

    def test_fills_to_max_columns(self, printer):
        """Test padded line has exactly max columns."""
        printer.print_padded(20, " ┌", "┐ ", "─")
        line = printer.out.getvalue().rstrip("\n")
        assert visible_length(line) == 20
        assert line == " ┌" + "─" * 16 + "┐ "

    def test_colored_before_and_after(self):
        """Test color codes in before/after do not shorten the fill."""
        out = io.StringIO()
        printer = LinePrinter(out=out, width=30, use_colors=True)
        printer.print_padded(30, f"{Colors.GRAY} │", f"{Colors.GRAY} │ ", " ")
        line = out.getvalue().rstrip("\n")
        assert visible_length(line) == 30
        assert Colors.GRAY in line

    def test_clamped_when_too_long(self, printer):
        """Test fill count never goes negative."""
        printer.print_padded(5, "abcdef", "ghi", "-")
        assert printer.out.getvalue() == "abcdefghi\n"


class TestPrintWrapped:
    """Tests for LinePrinter.print_wrapped."""

    def test_single_line_padded(self, printer):
        """Test short text is padded to the full width."""
        printer.print_wrapped(20, "| ", " |", "hello")
        assert printer.out.getvalue() == "| hello " + " " * 10 + " |\n"

    def test_wraps_words(self, printer):
        """Test words are packed greedily across lines."""
        printer.print_wrapped(20, "| ", " |", "aaa bbb ccc ddd eee")
        lines = printer.out.getvalue().splitlines()
        assert len(lines) == 2
        assert lines[0] == "| aaa bbb ccc ddd  |"
        assert lines[1].startswith("| eee ")
        assert all(visible_length(line) == 20 for line in lines)

    def test_long_word_gets_own_line(self, printer):
        """Test a word wider than the line is not preceded by an empty line."""
        printer.print_wrapped(10, "", "", "abcdefghijklmno")
        assert printer.out.getvalue() == "abcdefghijklmno \n"

    def test_colored_words_measured_visibly(self, printer):
        """Test ANSI codes inside the text do not cause early wraps."""
        printer.print_wrapped(12, "", "", f"{Colors.RED}⚠ Error")
        assert printer.out.getvalue().splitlines() == ["⚠ Error     "]


class TestPrintBanner:
    """Tests for LinePrinter.print_banner."""

    def test_box_structure(self, printer):
        """Test banner draws borders, title, separator and body."""
        printer.print_banner("success", "Setup complete", ["Please re-enter the shell."])
        lines = printer.out.getvalue().splitlines()

        assert lines[0].startswith(" ┌─")
        assert lines[0].endswith("┐ ")
        assert "✓ Setup complete" in lines[1]
        assert lines[2] == " │" + " " * 55 + " │ "
        assert "Please re-enter the shell." in lines[3]
        assert lines[-1].startswith(" └─")
        assert all(visible_length(line) == 60 for line in lines)

    def test_empty_body_line_is_blank(self, printer):
        """Test empty body strings render as blank boxed lines."""
        printer.print_banner("warning", "Careful", ["first", "", "second"])
        lines = printer.out.getvalue().splitlines()
        assert lines[4].strip("│ ") == ""

    @pytest.mark.parametrize(
        "kind,glyph",
        [("error", "⚠ "), ("warning", "⚠ "), ("success", "✓ ")],
    )
    def test_title_glyphs(self, printer, kind, glyph):
        """Test each kind prefixes its glyph."""
        printer.print_banner(kind, "Title")
        assert f"{glyph}Title" in printer.out.getvalue()

    def test_info_has_no_glyph(self, printer):
        """Test info banners show the bare title."""
        printer.print_banner("info", "Interactive Setup Wizard")
        title_line = printer.out.getvalue().splitlines()[1]
        assert title_line.startswith(" │ Interactive Setup Wizard")

    def test_unknown_kind_raises(self, printer):
        """Test unknown banner kind is rejected."""
        with pytest.raises(ValueError, match="Unknown banner kind"):
            printer.print_banner("fatal", "Title")

    def test_width_capped_at_max_width(self, monkeypatch):
        """Test width is the terminal width capped at 100."""
        import os

        monkeypatch.setattr(
            "devenv.terminal.shutil.get_terminal_size", lambda: os.terminal_size((180, 40))
        )
        assert LinePrinter(out=io.StringIO(), use_colors=False).width == 100


class TestPrintStatusLine:
    """Tests for LinePrinter.print_status_line."""

    def test_success_to_out(self, printer):
        """Test success line goes to the output stream."""
        printer.print_status_line("success", "File ./a exists")
        assert printer.out.getvalue() == " [✓] File ./a exists\n"
        assert printer.err.getvalue() == ""

    def test_error_to_err(self, printer):
        """Test error line goes to the error stream."""
        printer.print_status_line("error", "File ./a does not exist")
        assert printer.err.getvalue() == " [✕] File ./a does not exist\n"
        assert printer.out.getvalue() == ""

    def test_warning_glyph(self, printer):
        """Test warning uses the question mark glyph."""
        printer.print_status_line("warning", "Unknown")
        assert printer.out.getvalue() == " [?] Unknown\n"

    def test_colors_kept_when_enabled(self):
        """Test colored output contains the glyph color."""
        out = io.StringIO()
        LinePrinter(out=out, use_colors=True).print_status_line("success", "ok")
        assert f"{Colors.GREEN}✓" in out.getvalue()


class TestMuted:
    """Tests for LinePrinter.muted."""

    def test_discards_output_keeps_errors(self, printer):
        """Test muted printer hides regular output only."""
        quiet = printer.muted()
        quiet.print_status_line("success", "hidden")
        quiet.print_status_line("error", "shown")

        assert printer.out.getvalue() == ""
        assert "shown" in printer.err.getvalue()


class TestPrintFiglet:
    """Tests for LinePrinter.print_figlet."""

    def test_fallback_without_figlet(self, printer, no_figlet):
        """Test plain title is printed when figlet is missing."""
        printer.print_figlet("My Project")
        assert "My Project" in printer.out.getvalue()

    def test_empty_title_prints_nothing(self, printer, no_figlet):
        """Test empty title produces no output."""
        printer.print_figlet("")
        assert printer.out.getvalue() == ""


class TestPrintInfo:
    """Tests for LinePrinter.print_info."""

    def test_tree_output(self, printer):
        """Test groups render with tree symbols and descriptions."""
        groups = [
            InfoGroup(
                name="Commands",
                items=(InfoItem("setup", "Run the setup wizard"), InfoItem("check")),
            )
        ]
        printer.print_info(groups)
        lines = printer.out.getvalue().splitlines()

        assert lines[0] == " Commands:"
        assert lines[1] == "   ├ setup # Run the setup wizard"
        assert lines[2] == "   └ check"
        assert lines[3] == ""
