"""Tests for PowerShell quoting, encoding and error cleanup."""

import base64

from console_actions.utils.powershell import (
    build_command_line,
    clean_error_stream,
    encode_command,
    quote_literal,
)


class TestQuoteLiteral:
    """Tests for quote_literal()."""

    def test_plain_value(self) -> None:
        """Plain values are wrapped in single quotes."""
        assert quote_literal("Notepad") == "'Notepad'"

    def test_single_quote_doubled(self) -> None:
        """Embedded single quotes are doubled."""
        assert quote_literal("O'Brien's App") == "'O''Brien''s App'"

    def test_typographic_quote_doubled(self) -> None:
        """Typographic quotes are escaped the same way."""
        assert quote_literal("it\u2019s") == "'it\u2019\u2019s'"

    def test_variables_not_expanded(self) -> None:
        """Dollar signs stay literal inside single quotes."""
        assert quote_literal("$env:PATH; Remove-Item C:\\") == "'$env:PATH; Remove-Item C:\\'"


def test_encode_command_is_utf16le_base64() -> None:
    """-EncodedCommand expects base64 of UTF-16LE."""
    encoded = encode_command("Get-Date")

    assert base64.b64decode(encoded).decode("utf-16-le") == "Get-Date"


def test_build_command_line() -> None:
    """Command line runs powershell.exe non-interactively."""
    command = build_command_line("Get-Date")

    assert command.startswith("powershell.exe -NoLogo -NoProfile -NonInteractive")
    assert "-ExecutionPolicy Bypass" in command
    assert command.endswith(f"-EncodedCommand {encode_command('Get-Date')}")


class TestCleanErrorStream:
    """Tests for clean_error_stream()."""

    def test_plain_text_passthrough(self) -> None:
        """Non-CLIXML text is only stripped."""
        assert clean_error_stream("  Access denied\n") == "Access denied"

    def test_clixml_error_records(self) -> None:
        """Error strings are extracted from CLIXML."""
        stderr = (
            "#< CLIXML\n"
            '<Objs Version="1.1.0.1" xmlns="http://schemas.microsoft.com/powershell/2004/04">'
            '<S S="Error">Application not found_x000D__x000A_</S>'
            '<S S="Error">At line:1 char:1_x000D__x000A_</S>'
            '<S S="Verbose">ignored</S>'
            "</Objs>"
        )

        assert clean_error_stream(stderr) == "Application not found\nAt line:1 char:1"

    def test_broken_clixml_returned_as_is(self) -> None:
        """Unparseable CLIXML falls back to the raw text."""
        stderr = "#< CLIXML\n<Objs><S S="

        assert clean_error_stream(stderr) == stderr
