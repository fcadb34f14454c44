from __future__ import annotations

import unittest

from bulk_import.csv_text import encode_cell, encode_row, encode_rows, iter_rows, parse_line


class EncodeTests(unittest.TestCase):
    def test_plain_cells_are_left_bare(self):
        self.assertEqual(encode_row(["Apple", "A2483", ""]), "Apple,A2483,")

    def test_commas_quotes_and_newlines_are_quoted(self):
        self.assertEqual(encode_cell('a,b "c"'), '"a,b ""c"""')
        self.assertEqual(encode_cell('say "hi"'), '"say ""hi"""')
        self.assertEqual(encode_cell("two\nlines"), '"two\nlines"')

    def test_none_encodes_as_empty(self):
        self.assertEqual(encode_cell(None), "")


class ParseLineTests(unittest.TestCase):
    def test_quoted_value_round_trips(self):
        original = 'a,b "c"'
        line = encode_row(["left", original, "right"])
        self.assertEqual(parse_line(line), ["left", original, "right"])

    def test_empty_cells_are_kept(self):
        self.assertEqual(parse_line(",,"), ["", "", ""])
        self.assertEqual(parse_line(""), [""])

    def test_cells_are_not_trimmed(self):
        self.assertEqual(parse_line(" a , b"), [" a ", " b"])

    def test_doubled_quote_outside_quotes_toggles_twice(self):
        self.assertEqual(parse_line('""'), [""])


class IterRowsTests(unittest.TestCase):
    def test_multiline_quoted_cell_stays_in_one_row(self):
        rows = [["id", "notes"], ["1", "first line\nsecond, line"], ["2", "plain"]]
        self.assertEqual(list(iter_rows(encode_rows(rows))), rows)

    def test_crlf_and_trailing_newline(self):
        text = "a,b\r\nc,d\r\n"
        self.assertEqual(list(iter_rows(text)), [["a", "b"], ["c", "d"]])

    def test_blank_lines_are_yielded_as_single_empty_cell(self):
        self.assertEqual(list(iter_rows("a\n\nb")), [["a"], [""], ["b"]])

    def test_empty_text_yields_nothing(self):
        self.assertEqual(list(iter_rows("")), [])


if __name__ == "__main__":
    unittest.main()
