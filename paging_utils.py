# paging_utils.py

from typing import Dict, List, Optional

from paging_engine import PAGE_TABLE_FRAME, OwnerKind, OwnerTag, PagingSystem, PhysicalMemory

# Logical offsets used by the predefined "variables", one per page
SAMPLE_OFFSETS = (100, 200, 50, 300)

PROCESS_COLORS = ["#8ecae6", "#ffb703", "#90be6d", "#f28482", "#cdb4db", "#f6bd60"]
FREE_COLOR = "#d3d3d3"
PAGE_TABLE_COLOR = "#555555"
ACCESS_COLOR = "#e63946"


def get_color(tag: OwnerTag) -> str:
    """Return a fill color for a frame owner."""
    if tag.kind == OwnerKind.PAGE_TABLE:
        return PAGE_TABLE_COLOR
    if tag.kind == OwnerKind.PROCESS:
        return PROCESS_COLORS[(tag.pid - 1) % len(PROCESS_COLORS)]
    return FREE_COLOR


def owner_label(tag: OwnerTag) -> str:
    if tag.kind == OwnerKind.PAGE_TABLE:
        return "PAGE TABLES"
    if tag.kind == OwnerKind.PROCESS:
        return f"P{tag.pid}"
    return "FREE"


def sample_address(page: int, page_size: int) -> int:
    """Logical address of the predefined variable living in `page`."""
    return page * page_size + SAMPLE_OFFSETS[page % len(SAMPLE_OFFSETS)]


def parse_address(text: str) -> int:
    """Parse a decimal or 0x-prefixed hex address. Raises ValueError."""
    return int(text.strip(), 0)


def frame_rows(system: PagingSystem, accessed_frame: Optional[int] = None) -> List[Dict]:
    rows = []
    for i, tag in enumerate(system.ownership):
        rows.append({
            "frame": i,
            "start": f"0x{system.memory.frame_base(i):04X}",
            "owner": owner_label(tag),
            "accessed": i == accessed_frame,
        })
    return rows


def render_ram(system: PagingSystem, accessed_frame: Optional[int] = None) -> List[str]:
    """
    Text view of physical memory, one line per frame.

    The frame touched by the last access (if any) is marked with an arrow.
    """
    total_kib = system.memory.size // 1024
    lines = [f"--- RAM ({total_kib} KiB) ---"]
    for row in frame_rows(system, accessed_frame):
        line = f"Frame {row['frame']:2d} ({row['start']}): [ {row['owner']:^11} ]"
        if row["accessed"]:
            line += " <--- ACCESS"
        lines.append(line)
    return lines


def hex_dump(memory: PhysicalMemory, frame: int, start: int = 0,
             length: int = 16, width: int = 16) -> List[str]:
    """Hex dump of `length` bytes of a frame, starting at byte `start`."""
    data = memory.frame_bytes(frame)[start:start + length]
    base = memory.frame_base(frame) + start
    lines = []
    for pos in range(0, len(data), width):
        chunk = data[pos:pos + width]
        lines.append(f"0x{base + pos:04X}: " + " ".join(f"{b:02X}" for b in chunk))
    return lines


def page_table_dump(system: PagingSystem) -> List[str]:
    """Hex dump of every process's page table inside frame 0."""
    lines = []
    page_count = system.processes.page_count
    for proc in system.processes:
        lines.append(f"P{proc.pid} (PTBR 0x{proc.page_table_base:04X}):")
        lines.extend(
            "  " + line
            for line in hex_dump(system.memory, PAGE_TABLE_FRAME, proc.page_table_base, page_count)
        )
    return lines
