"""Tests for the display helpers shared by both user interfaces."""

import pytest

from paging_engine import FREE, PAGE_TABLE_REGION, OwnerTag
from paging_utils import (
    FREE_COLOR,
    PAGE_TABLE_COLOR,
    frame_rows,
    get_color,
    hex_dump,
    owner_label,
    page_table_dump,
    parse_address,
    render_ram,
    sample_address,
)


class TestLabelsAndColors:

    def test_labels(self) -> None:
        assert owner_label(FREE) == "FREE"
        assert owner_label(PAGE_TABLE_REGION) == "PAGE TABLES"
        assert owner_label(OwnerTag.process(3)) == "P3"

    def test_colors_distinguish_owners(self) -> None:
        assert get_color(FREE) == FREE_COLOR
        assert get_color(PAGE_TABLE_REGION) == PAGE_TABLE_COLOR
        assert get_color(OwnerTag.process(1)) != get_color(OwnerTag.process(2))


class TestAddresses:

    @pytest.mark.parametrize("page, expected", [(0, 100), (1, 1224), (2, 2098), (3, 3372)])
    def test_sample_addresses(self, page, expected) -> None:
        assert sample_address(page, 1024) == expected

    @pytest.mark.parametrize("text, expected", [("100", 100), (" 0x04C8 ", 1224), ("0", 0)])
    def test_parse_address(self, text, expected) -> None:
        assert parse_address(text) == expected

    def test_parse_address_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            parse_address("frame 3")


class TestRamView:

    def test_one_line_per_frame(self, system) -> None:
        lines = render_ram(system)
        assert lines[0] == "--- RAM (16 KiB) ---"
        assert len(lines) == 17

    def test_accessed_frame_marked(self, system) -> None:
        lines = render_ram(system, accessed_frame=11)
        marked = [line for line in lines if line.endswith("<--- ACCESS")]
        assert marked == ["Frame 11 (0x2C00): [     P1      ] <--- ACCESS"]

    def test_free_frame_label(self, system) -> None:
        assert "[    FREE     ]" in render_ram(system)[1 + 6]

    def test_frame_rows(self, system) -> None:
        rows = frame_rows(system, accessed_frame=0)
        assert rows[0] == {"frame": 0, "start": "0x0000", "owner": "PAGE TABLES", "accessed": True}
        assert not any(r["accessed"] for r in rows[1:])


class TestHexDump:

    def test_dump_of_p2_table(self, system) -> None:
        assert hex_dump(system.memory, 0, 0x0100, 4) == ["0x0100: 01 02 0C 0D"]

    def test_dump_wraps_lines(self, system) -> None:
        lines = hex_dump(system.memory, 0, 0, 8, width=4)
        assert lines == ["0x0000: 05 08 09 0B", "0x0004: 00 00 00 00"]

    def test_page_table_dump(self, system) -> None:
        assert page_table_dump(system) == [
            "P1 (PTBR 0x0000):",
            "  0x0000: 05 08 09 0B",
            "P2 (PTBR 0x0100):",
            "  0x0100: 01 02 0C 0D",
            "P3 (PTBR 0x0200):",
            "  0x0200: 03 04 0E 0F",
        ]
