"""Size-detail grid: projection, spreadsheet paste and flattening."""
import pytest

from knitadmin.db import SizeRange
from knitadmin.patterns.errors import InvalidSizeValueError, UnknownMeasurementItemError
from knitadmin.patterns.size_table import SizeDetailTable

ITEMS = ["shoulder_width", "chest_width", "sleeve_length"]


@pytest.fixture
def table():
    return SizeDetailTable(ITEMS)


def _filled(table):
    return {
        (r, c)
        for r, row in enumerate(table.rows())
        for c, value in enumerate(row)
        if value != ""
    }


class TestShape:
    def test_rows_are_items_and_columns_are_all_bins(self, table):
        assert table.row_count == 3
        assert table.column_count == 18
        assert table.size_ranges[-1] == SizeRange.MAX

    def test_projection_ignores_items_outside_the_rule(self):
        table = SizeDetailTable.from_size_details(ITEMS, [
            {"size_range": "74-79", "measurements": {"chest_width": 45.0, "hem_ribbing_length": 3.0}},
        ])
        assert table.get_cell("74-79", "chest_width") == "45"
        assert "hem_ribbing_length" not in table.grid()["74-79"]

    def test_set_cell_outside_the_rule(self, table):
        with pytest.raises(UnknownMeasurementItemError):
            table.set_cell("74-79", "hem_ribbing_length", "3")


class TestPaste:
    def test_two_by_two_block_writes_four_cells(self, table):
        written = table.paste("1\t2\n3\t4", 0, 1)
        assert written == 4
        assert _filled(table) == {(0, 1), (0, 2), (1, 1), (1, 2)}
        assert table.get_cell("54-57", "shoulder_width") == "1"
        assert table.get_cell("58-61", "chest_width") == "4"

    def test_other_cells_untouched(self, table):
        table.set_cell("max", "sleeve_length", "9")
        table.paste("1\t2\n3\t4", 0, 1)
        assert table.get_cell("max", "sleeve_length") == "9"
        assert table.get_cell("50-53", "shoulder_width") == ""

    def test_oversized_block_writes_only_in_bounds_cells(self, table):
        block = "\n".join("\t".join(["7"] * 5) for _ in range(5))
        written = table.paste(block, 1, 15)
        # rows 1-2, columns 15-17
        assert written == 6
        assert _filled(table) == {(r, c) for r in (1, 2) for c in (15, 16, 17)}

    def test_trailing_newline_and_crlf(self, table):
        assert table.paste("1\t2\r\n3\t4\r\n", 0, 0) == 4

    def test_anchor_outside_table_writes_nothing(self, table):
        assert table.paste("1", 5, 0) == 0
        assert _filled(table) == set()


class TestFlatten:
    def test_blank_cells_become_zero(self, table):
        table.set_cell("74-79", "chest_width", "45.5")
        details = table.to_size_details()
        assert len(details) == 18
        by_size = {d["size_range"]: d["measurements"] for d in details}
        assert by_size["74-79"] == {"shoulder_width": 0.0, "chest_width": 45.5, "sleeve_length": 0.0}

    def test_non_numeric_cell(self, table):
        table.set_cell("min", "chest_width", "abc")
        with pytest.raises(InvalidSizeValueError) as exc:
            table.to_size_details()
        assert exc.value.size_range == "min"
        assert exc.value.item_id == "chest_width"

    def test_bulk_cells_become_floats(self, table):
        table.set_cells({"74-79": {"chest_width": 45}, "80-84": {"chest_width": "52"}})
        details = {d["size_range"]: d["measurements"] for d in table.to_size_details()}
        assert details["74-79"]["chest_width"] == 45.0
        assert details["80-84"]["chest_width"] == 52.0
