"""
Paging Engine - Physical Memory, Page Tables & the MMU

This module holds the simulation core of the paging visualizer:
    - A byte-addressable physical memory divided into fixed-size frames
    - Per-process page tables stored inside that memory (all in frame 0)
    - A frame ownership registry used to label frames for display
    - The Memory Management Unit (MMU) that translates logical addresses

Everything is built once by `initialize_system` and is read-only afterwards.
The user interfaces (Streamlit app, console menu) only talk to the
`PagingSystem` returned by the initializer.
"""

# =============================================================================
# IMPORTS
# =============================================================================

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

PAGE_TABLE_FRAME = 0     # Frame reserved for every process's page table
MAX_ENTRY_VALUE = 0xFF   # Page-table entries are single unsigned bytes


# =============================================================================
# ERRORS
# =============================================================================

class PagingError(Exception):
    """
    Base class for every error raised by the paging core.

    Attributes:
        fatal (bool): True for internal-consistency violations that mean the
            initialization invariants were broken. Shells abort on these
            instead of re-prompting.
    """
    fatal = False


class OutOfBounds(PagingError, IndexError):
    """Physical address outside the memory array."""


class OutOfRange(PagingError, IndexError):
    """Frame index outside [0, frame_count)."""


class UnknownProcess(PagingError, LookupError):
    """Process id not in the descriptor table."""


class InvalidLogicalAddress(PagingError, ValueError):
    """Logical address outside the process address space."""


class PageNumberOutOfRange(PagingError, ValueError):
    """Decomposed page number is not below page_count."""


class ConfigurationError(PagingError, ValueError):
    """Rejected system configuration."""


class CorruptPageTable(PagingError):
    """Page-table entry address falls outside the page-table frame."""
    fatal = True


class FrameOutOfRange(PagingError):
    """Page-table entry names a frame that does not exist."""
    fatal = True


@dataclass(frozen=True)
class Failure:
    """
    Value-level failure returned across the core boundary.

    Attributes:
        error (PagingError): The error that stopped the operation
    """
    error: PagingError

    @property
    def kind(self) -> str:
        return type(self.error).__name__

    @property
    def fatal(self) -> bool:
        return self.error.fatal

    @property
    def message(self) -> str:
        return str(self.error)

    def __str__(self):
        return f"{self.kind}: {self.message}"


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class ProcessConfig:
    """
    Static description of one process.

    Attributes:
        pid (int): Positive process identifier
        page_table_base (int): Byte offset of the page table inside frame 0
        data_frames (Tuple[int, ...]): Physical frame backing each page,
            indexed by page number
    """
    pid: int
    page_table_base: int
    data_frames: Tuple[int, ...]


@dataclass(frozen=True)
class SystemConfig:
    """
    Memory geometry plus the process layout.

    Attributes:
        frame_size (int): Bytes per frame (and per page), a power of two
        frame_count (int): Number of physical frames
        page_count (int): Pages in every process's logical address space
        processes (Tuple[ProcessConfig, ...]): Processes to load
    """
    frame_size: int = 1024
    frame_count: int = 16
    page_count: int = 4
    processes: Tuple[ProcessConfig, ...] = ()

    @property
    def memory_size(self) -> int:
        return self.frame_size * self.frame_count

    def validate(self):
        """
        Check every layout invariant the MMU relies on.

        Raises:
            ConfigurationError: On the first violated rule
        """
        if self.frame_size <= 0 or self.frame_size & (self.frame_size - 1):
            raise ConfigurationError(f"frame_size must be a power of two, got {self.frame_size}")
        if not 1 <= self.frame_count <= MAX_ENTRY_VALUE + 1:
            # Entries are one byte wide, so frame numbers above 255 cannot be stored
            raise ConfigurationError(
                f"frame_count must be in 1..{MAX_ENTRY_VALUE + 1}, got {self.frame_count}"
            )
        if self.page_count < 1:
            raise ConfigurationError(f"page_count must be positive, got {self.page_count}")
        if not self.processes:
            raise ConfigurationError("at least one process is required")

        seen_pids = set()
        assigned: Dict[int, int] = {}
        for proc in self.processes:
            if proc.pid <= 0:
                raise ConfigurationError(f"pid must be positive, got {proc.pid}")
            if proc.pid in seen_pids:
                raise ConfigurationError(f"duplicate pid {proc.pid}")
            seen_pids.add(proc.pid)

            if proc.page_table_base < 0 or proc.page_table_base + self.page_count > self.frame_size:
                raise ConfigurationError(
                    f"P{proc.pid} page table at 0x{proc.page_table_base:04X} "
                    f"does not fit inside frame {PAGE_TABLE_FRAME}"
                )
            if len(proc.data_frames) != self.page_count:
                raise ConfigurationError(
                    f"P{proc.pid} maps {len(proc.data_frames)} pages, expected {self.page_count}"
                )
            for frame in proc.data_frames:
                if frame == PAGE_TABLE_FRAME or not 0 <= frame < self.frame_count:
                    raise ConfigurationError(f"P{proc.pid} cannot use frame {frame}")
                if frame in assigned:
                    raise ConfigurationError(
                        f"frame {frame} assigned to both P{assigned[frame]} and P{proc.pid}"
                    )
                assigned[frame] = proc.pid

        # Tables share frame 0: sorted by base, each must end before the next starts
        ordered = sorted(self.processes, key=lambda p: p.page_table_base)
        for lower, upper in zip(ordered, ordered[1:]):
            if lower.page_table_base + self.page_count > upper.page_table_base:
                raise ConfigurationError(
                    f"page tables of P{lower.pid} and P{upper.pid} overlap"
                )


REFERENCE_CONFIG = SystemConfig(
    frame_size=1024,
    frame_count=16,
    page_count=4,
    processes=(
        ProcessConfig(pid=1, page_table_base=0x0000, data_frames=(5, 8, 9, 11)),
        ProcessConfig(pid=2, page_table_base=0x0100, data_frames=(1, 2, 12, 13)),
        ProcessConfig(pid=3, page_table_base=0x0200, data_frames=(3, 4, 14, 15)),
    ),
)


# =============================================================================
# PHYSICAL MEMORY
# =============================================================================

class PhysicalMemory:
    """
    Fixed-size, byte-addressable RAM.

    The array is zero-filled on construction. `initialize` writes the
    page-table region exactly once; after that the memory only serves reads.
    """

    def __init__(self, frame_size: int, frame_count: int):
        if frame_size <= 0 or frame_size & (frame_size - 1):
            # Address split is a mask/shift pair
            raise ConfigurationError(f"frame_size must be a power of two, got {frame_size}")
        if frame_count < 1:
            raise ConfigurationError(f"frame_count must be positive, got {frame_count}")
        self.frame_size = frame_size
        self.frame_count = frame_count
        self._cells = bytearray(frame_size * frame_count)
        self._initialized = False

    @property
    def size(self) -> int:
        return len(self._cells)

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self, writes: Mapping[int, int]):
        """
        Perform the one-time write of initial contents.

        Args:
            writes (Mapping[int, int]): physical address -> byte value

        Raises:
            RuntimeError: If memory was already initialized
            OutOfBounds: If an address is outside memory
            ValueError: If a value does not fit in one byte
        """
        if self._initialized:
            raise RuntimeError("physical memory is already initialized")
        for address, value in writes.items():
            self._bounds_check(address)
            if not 0 <= value <= MAX_ENTRY_VALUE:
                raise ValueError(f"value must be a byte, got {value}")
        for address, value in writes.items():
            self._cells[address] = value
        self._initialized = True

    def read(self, physical_address: int) -> int:
        self._bounds_check(physical_address)
        return self._cells[physical_address]

    def frame_base(self, frame: int) -> int:
        return frame * self.frame_size

    def frame_bytes(self, frame: int) -> bytes:
        if not 0 <= frame < self.frame_count:
            raise OutOfRange(f"frame index out of range: {frame}")
        start = self.frame_base(frame)
        return bytes(self._cells[start:start + self.frame_size])

    def _bounds_check(self, address: int):
        if not isinstance(address, int) or not 0 <= address < len(self._cells):
            raise OutOfBounds(
                f"physical address out of bounds: {address} (memory is {len(self._cells)} bytes)"
            )


# =============================================================================
# FRAME OWNERSHIP
# =============================================================================

class OwnerKind:
    """
    Enumeration of what can occupy a frame.

    FREE:       Nothing is loaded in the frame
    PAGE_TABLE: The frame holds the page-table region
    PROCESS:    The frame holds data of one process
    """
    FREE = "Free"
    PAGE_TABLE = "PageTableRegion"
    PROCESS = "Process"


@dataclass(frozen=True)
class OwnerTag:
    kind: str
    pid: Optional[int] = None

    @classmethod
    def process(cls, pid: int) -> "OwnerTag":
        return cls(OwnerKind.PROCESS, pid)

    @property
    def is_free(self) -> bool:
        return self.kind == OwnerKind.FREE

    def __str__(self):
        if self.kind == OwnerKind.PROCESS:
            return f"Process({self.pid})"
        return self.kind


FREE = OwnerTag(OwnerKind.FREE)
PAGE_TABLE_REGION = OwnerTag(OwnerKind.PAGE_TABLE)


class FrameOwnership:
    """
    Registry of which owner occupies each frame.

    Purely informational: used to label and colour frames when memory is
    displayed. The MMU never reads it.
    """

    def __init__(self, tags: List[OwnerTag]):
        self._tags = tuple(tags)

    def __len__(self):
        return len(self._tags)

    def __iter__(self) -> Iterator[OwnerTag]:
        return iter(self._tags)

    def owner_of(self, frame_index: int) -> OwnerTag:
        if not isinstance(frame_index, int) or not 0 <= frame_index < len(self._tags):
            raise OutOfRange(
                f"frame index out of range: {frame_index} (frames 0..{len(self._tags) - 1})"
            )
        return self._tags[frame_index]

    def frames_of(self, pid: int) -> List[int]:
        return [i for i, tag in enumerate(self._tags) if tag == OwnerTag.process(pid)]

    def free_frames(self) -> List[int]:
        return [i for i, tag in enumerate(self._tags) if tag.is_free]


# =============================================================================
# PROCESS DESCRIPTORS
# =============================================================================

@dataclass(frozen=True)
class ProcessDescriptor:
    """
    Task control block of a process, reduced to what paging needs.

    Attributes:
        pid (int): Process identifier
        page_table_base (int): PTBR, byte offset of the table inside frame 0
    """
    pid: int
    page_table_base: int


class ProcessTable:
    """Fixed set of process descriptors, in configured order."""

    def __init__(self, descriptors: List[ProcessDescriptor], page_count: int):
        self._by_pid: Dict[int, ProcessDescriptor] = {d.pid: d for d in descriptors}
        self.page_count = page_count

    def __len__(self):
        return len(self._by_pid)

    def __iter__(self) -> Iterator[ProcessDescriptor]:
        return iter(self._by_pid.values())

    def __contains__(self, pid) -> bool:
        return pid in self._by_pid

    @property
    def pids(self) -> List[int]:
        return list(self._by_pid)

    def descriptor(self, pid: int) -> ProcessDescriptor:
        try:
            return self._by_pid[pid]
        except KeyError:
            raise UnknownProcess(
                f"unknown process P{pid} (known: {', '.join(f'P{p}' for p in self._by_pid)})"
            ) from None


# =============================================================================
# MMU - Address Translation Unit
# =============================================================================

@dataclass(frozen=True)
class TranslationResult:
    """
    Every intermediate value of one translation.

    Attributes:
        pid (int): Process whose page table was used
        page_table_base (int): PTBR of that process
        logical_address (int): Address that was translated
        page_number (int): High bits of the logical address
        offset (int): Low bits of the logical address
        entry_address (int): Physical address of the page-table entry
        frame (int): Frame number read from the entry
        physical_address (int): frame * page_size + offset
        page_size (int): Page size used for the split
    """
    pid: int
    page_table_base: int
    logical_address: int
    page_number: int
    offset: int
    entry_address: int
    frame: int
    physical_address: int
    page_size: int

    def steps(self) -> List[str]:
        """
        Describe each translation stage as a line of text.

        Returns:
            List[str]: Human-readable trace, in execution order
        """
        return [
            f"1. Logical address: 0x{self.logical_address:04X} (decimal {self.logical_address})",
            f"   -> Page (P): {self.page_number}",
            f"   -> Offset (D): {self.offset} (0x{self.offset:03X})",
            f"2. Page table of P{self.pid} in frame {PAGE_TABLE_FRAME} "
            f"(PTBR 0x{self.page_table_base:04X})",
            f"   -> Entry address (PTBR + P): 0x{self.page_table_base:04X} + {self.page_number} "
            f"= 0x{self.entry_address:04X}",
            f"   -> Value read (RAM[0x{self.entry_address:04X}]): {self.frame}",
            f"3. Physical frame (F): {self.frame}",
            f"4. Physical address (F * {self.page_size} + D): "
            f"({self.frame} * {self.page_size}) + {self.offset} = {self.physical_address}",
            f"   -> Final physical address: 0x{self.physical_address:04X} "
            f"(decimal {self.physical_address})",
        ]


TranslationOutcome = Union[TranslationResult, Failure]


class MMU:
    """
    Memory Management Unit.

    Translates logical addresses using page tables read straight out of
    physical memory. Holds no state besides the memory it reads, so the
    same instance can serve any process: the active process is passed to
    every call.

    Attributes:
        memory (PhysicalMemory): RAM holding the page tables
        page_size (int): Bytes per page, equal to the frame size
        page_count (int): Pages in each logical address space
        offset_bits (int): log2(page_size)
    """

    def __init__(self, memory: PhysicalMemory, page_count: int):
        self.memory = memory
        self.page_size = memory.frame_size
        self.page_count = page_count
        self.offset_bits = self.page_size.bit_length() - 1

    @property
    def address_space_size(self) -> int:
        return self.page_count * self.page_size

    def split(self, logical_address: int) -> Tuple[int, int]:
        """Return (page_number, offset) for a logical address."""
        offset = logical_address & (self.page_size - 1)
        page_number = logical_address >> self.offset_bits
        return page_number, offset

    def resolve(self, process: ProcessDescriptor, logical_address: int) -> TranslationResult:
        """
        Translate a logical address, raising on failure.

        Steps:
        1. Check the address is an integer inside the logical address space
        2. Split it into page number and offset
        3. Locate the page-table entry inside frame 0
        4. Read the frame number and check it exists
        5. Combine frame and offset into the physical address

        Args:
            process (ProcessDescriptor): Process whose page table is used
            logical_address (int): Address in that process's space

        Returns:
            TranslationResult: All intermediate values of the walk

        Raises:
            InvalidLogicalAddress: Address not an integer, or outside
                [0, page_count * page_size)
            PageNumberOutOfRange: Page number not below page_count
            CorruptPageTable: Entry address outside frame 0
            FrameOutOfRange: Entry value not a valid frame
        """
        if not isinstance(logical_address, int) or isinstance(logical_address, bool):
            raise InvalidLogicalAddress(f"logical address must be an integer, got {logical_address!r}")
        if not 0 <= logical_address < self.address_space_size:
            raise InvalidLogicalAddress(
                f"logical address {logical_address} outside 0..{self.address_space_size - 1}"
            )

        page_number, offset = self.split(logical_address)
        if page_number >= self.page_count:
            raise PageNumberOutOfRange(
                f"page {page_number} out of range for P{process.pid} ({self.page_count} pages)"
            )

        table_start = self.memory.frame_base(PAGE_TABLE_FRAME)
        entry_address = table_start + process.page_table_base + page_number
        if not table_start <= entry_address < table_start + self.memory.frame_size:
            logger.error("P%d page-table entry 0x%04X outside frame %d",
                         process.pid, entry_address, PAGE_TABLE_FRAME)
            raise CorruptPageTable(
                f"entry address 0x{entry_address:04X} of P{process.pid} "
                f"is outside frame {PAGE_TABLE_FRAME}"
            )

        frame = self.memory.read(entry_address)
        if frame >= self.memory.frame_count:
            logger.error("P%d page %d maps to missing frame %d",
                         process.pid, page_number, frame)
            raise FrameOutOfRange(
                f"entry 0x{entry_address:04X} names frame {frame}, "
                f"memory has {self.memory.frame_count} frames"
            )

        return TranslationResult(
            pid=process.pid,
            page_table_base=process.page_table_base,
            logical_address=logical_address,
            page_number=page_number,
            offset=offset,
            entry_address=entry_address,
            frame=frame,
            physical_address=frame * self.page_size + offset,
            page_size=self.page_size,
        )

    def translate(self, process: ProcessDescriptor, logical_address: int) -> TranslationOutcome:
        """Translate a logical address, returning a Failure instead of raising."""
        try:
            return self.resolve(process, logical_address)
        except PagingError as e:
            return Failure(e)


# =============================================================================
# SYSTEM INITIALIZATION
# =============================================================================

@dataclass
class PagingSystem:
    """
    The initialized memory, ownership registry and process table.

    Unpacks as `(memory, ownership, processes)`. The methods below are the
    boundary used by the shells: they never raise `PagingError`, they
    return a `Failure` value instead.

    Attributes:
        memory (PhysicalMemory): RAM with the page tables in frame 0
        ownership (FrameOwnership): Owner tag of every frame
        processes (ProcessTable): Descriptors of the loaded processes
        event_log (List[str]): Initialization, translation and error events,
            oldest first. Shells append to it.
    """
    memory: PhysicalMemory
    ownership: FrameOwnership
    processes: ProcessTable
    event_log: List[str] = field(default_factory=list)

    def __iter__(self):
        return iter((self.memory, self.ownership, self.processes))

    @property
    def mmu(self) -> MMU:
        return MMU(self.memory, self.processes.page_count)

    def translate(self, process: ProcessDescriptor, logical_address: int) -> TranslationOutcome:
        return self.mmu.translate(process, logical_address)

    def descriptor(self, pid: int) -> Union[ProcessDescriptor, Failure]:
        try:
            return self.processes.descriptor(pid)
        except PagingError as e:
            return Failure(e)

    def owner_of(self, frame_index: int) -> Union[OwnerTag, Failure]:
        try:
            return self.ownership.owner_of(frame_index)
        except PagingError as e:
            return Failure(e)

    def read_byte(self, physical_address: int) -> Union[int, Failure]:
        try:
            return self.memory.read(physical_address)
        except PagingError as e:
            return Failure(e)


def initialize_system(config: SystemConfig = REFERENCE_CONFIG) -> PagingSystem:
    """
    Build memory, page tables, ownership tags and descriptors.

    Args:
        config (SystemConfig): Geometry and process layout

    Returns:
        PagingSystem: Read-only system ready for translation

    Raises:
        ConfigurationError: If the configuration breaks a layout rule
    """
    config.validate()
    event_log = ["Initializing system..."]
    logger.info("initializing system")

    # ----- Page tables, all inside frame 0 -----
    table_start = PAGE_TABLE_FRAME * config.frame_size
    writes: Dict[int, int] = {}
    for proc in config.processes:
        for page, frame in enumerate(proc.data_frames):
            writes[table_start + proc.page_table_base + page] = frame
    memory = PhysicalMemory(config.frame_size, config.frame_count)
    memory.initialize(writes)

    # ----- Ownership tags for display -----
    tags = [FREE] * config.frame_count
    tags[PAGE_TABLE_FRAME] = PAGE_TABLE_REGION
    for proc in config.processes:
        for frame in proc.data_frames:
            tags[frame] = OwnerTag.process(proc.pid)
        event_log.append(
            f"P{proc.pid}: PTBR 0x{proc.page_table_base:04X}, "
            f"pages -> frames {list(proc.data_frames)}"
        )
        logger.info("P%d: PTBR 0x%04X, pages -> frames %s",
                    proc.pid, proc.page_table_base, list(proc.data_frames))
    ownership = FrameOwnership(tags)

    processes = ProcessTable(
        [ProcessDescriptor(p.pid, p.page_table_base) for p in config.processes],
        config.page_count,
    )

    logger.info("system ready: %d processes, %d frames of %d bytes, tables in frame %d",
                len(processes), config.frame_count, config.frame_size, PAGE_TABLE_FRAME)
    event_log.append(f"System ready. Page tables loaded in frame {PAGE_TABLE_FRAME}.")
    return PagingSystem(memory, ownership, processes, event_log)
