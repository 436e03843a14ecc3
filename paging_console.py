#!/usr/bin/env python3
"""
Paging Hardware Simulator: console menu

Text version of the visualizer. Shows the process panel, lets the user
switch the active process, access the predefined variable of a page or an
arbitrary logical address, and prints each MMU step plus the RAM layout
with the accessed frame highlighted.

Usage:
    paging-console
    paging-console --process 2
"""

import argparse
import logging
import sys
from typing import Callable, List, Optional

from paging_engine import (
    PAGE_TABLE_FRAME,
    REFERENCE_CONFIG,
    Failure,
    PagingSystem,
    ProcessDescriptor,
    initialize_system,
)
from paging_utils import parse_address, render_ram, sample_address

MENU = """
--- Actions ---
1. Switch active process
2. Access variable (one per page)
3. View RAM
4. Translate a logical address
0. Exit"""


class ConsoleSession:
    """
    One interactive run of the menu.

    Attributes:
        system (PagingSystem): Initialized memory and process table
        active (ProcessDescriptor): Process whose page table the MMU uses
        event_log (List[str]): The system event log, shared with other views
    """

    def __init__(self, system: PagingSystem, active: ProcessDescriptor,
                 input_fn: Callable[[str], str] = input,
                 output: Callable[[str], None] = print):
        self.system = system
        self.active = active
        self.input = input_fn
        self.output = output
        self.event_log: List[str] = system.event_log

    # -------------------------------------------------------------------------
    # Panels
    # -------------------------------------------------------------------------

    def show_processes(self):
        self.output("=" * 44)
        self.output("   PAGING HARDWARE SIMULATOR")
        self.output("=" * 44)
        self.output("--- Processes ---")
        self.output(f"Active process: P{self.active.pid}")
        for proc in self.system.processes:
            self.output(f"  TCB P{proc.pid} (PTBR: 0x{proc.page_table_base:04X})")

    def show_ram(self, accessed_frame: Optional[int] = None):
        for line in render_ram(self.system, accessed_frame):
            self.output(line)

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def switch_process(self):
        pids = ", ".join(str(p) for p in self.system.processes.pids)
        choice = self._ask_int(f"Switch to which process ({pids})? ")
        if choice is None:
            return True
        found = self.system.descriptor(choice)
        if isinstance(found, Failure):
            self.output(f"Invalid process. Keeping P{self.active.pid}.")
            return True
        self.active = found
        self.event_log.append(f"Active process -> P{found.pid}")
        self.output(f"Active process is now P{found.pid}.")
        return True

    def view_ram(self):
        self.show_ram()
        return True

    def access_variable(self):
        page_count = self.system.processes.page_count
        page = self._ask_int(f"Access which variable (page 0..{page_count - 1})? ")
        if page is None:
            return True
        if not 0 <= page < page_count:
            self.output("Invalid variable/page.")
            return True
        return self.translate(sample_address(page, self.system.memory.frame_size))

    def access_address(self):
        text = self.input("Logical address (decimal or 0x hex): ")
        try:
            address = parse_address(text)
        except ValueError:
            self.output("Error: invalid address. Try again.")
            return True
        return self.translate(address)

    def translate(self, logical_address: int) -> bool:
        """Run the MMU and print each step. Returns False on a fatal error."""
        self.output("")
        self.output("=" * 44)
        self.output("### MMU ###")
        self.output(f"Active process: P{self.active.pid}")
        self.output("=" * 44)

        outcome = self.system.translate(self.active, logical_address)
        if isinstance(outcome, Failure):
            self.event_log.append(f"P{self.active.pid} 0x{logical_address:04X}: {outcome}")
            if outcome.fatal:
                self.output(f"FATAL: {outcome}")
                return False
            self.output(f"Error: {outcome.message}")
            return True

        for step in outcome.steps()[:3]:
            self.output(step)
        self.output(f"\nReading page table (frame {PAGE_TABLE_FRAME})...")
        self.show_ram(PAGE_TABLE_FRAME)
        for step in outcome.steps()[3:]:
            self.output(step)
        self.output("\n5. Accessing RAM at the physical address...")
        self.show_ram(outcome.frame)

        self.event_log.append(
            f"P{outcome.pid}: 0x{outcome.logical_address:04X} -> 0x{outcome.physical_address:04X} "
            f"(page {outcome.page_number} -> frame {outcome.frame})"
        )
        return True

    # -------------------------------------------------------------------------
    # Loop
    # -------------------------------------------------------------------------

    def run(self) -> int:
        """
        Run the menu until the user exits.

        Returns:
            int: Process exit status, 1 if a fatal translation error occurred
        """
        actions = {
            1: self.switch_process,
            2: self.access_variable,
            3: self.view_ram,
            4: self.access_address,
        }
        while True:
            self.output("")
            self.show_processes()
            self.output(MENU)
            try:
                choice = self._ask_int("Choice: ")
            except EOFError:
                break
            if choice is None:
                continue
            if choice == 0:
                break
            action = actions.get(choice)
            if action is None:
                self.output("Invalid option.")
                continue
            try:
                keep_going = action()
            except EOFError:
                break
            if not keep_going:
                self.output("Simulator aborted: page tables are inconsistent.")
                return 1
        self.output("Simulator finished.")
        return 0

    def _ask_int(self, prompt: str) -> Optional[int]:
        text = self.input(prompt)
        try:
            return int(text.strip())
        except ValueError:
            self.output("Error: invalid input. Try again.")
            return None


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Paging address translation simulator")
    parser.add_argument("--process", type=int, default=REFERENCE_CONFIG.processes[0].pid,
                        help="initially active process id")
    parser.add_argument("--verbose", action="store_true", help="show initialization log")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
                        format="%(levelname)s: %(message)s")

    system = initialize_system(REFERENCE_CONFIG)
    active = system.descriptor(args.process)
    if isinstance(active, Failure):
        parser.error(active.message)
    return ConsoleSession(system, active).run()


if __name__ == "__main__":
    sys.exit(main())
