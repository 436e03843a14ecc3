"""Tests for the console menu, driven with scripted input."""

import pytest

from paging_console import ConsoleSession, main
from paging_engine import (
    FREE,
    FrameOwnership,
    PagingSystem,
    PhysicalMemory,
    ProcessDescriptor,
    ProcessTable,
)


def scripted(answers):
    """Return an input() replacement that replays `answers`, then hits EOF."""
    pending = list(answers)

    def fake_input(prompt: str = "") -> str:
        if not pending:
            raise EOFError
        return pending.pop(0)

    return fake_input


def run_session(system, pid, answers):
    out = []
    session = ConsoleSession(system, system.processes.descriptor(pid),
                             input_fn=scripted(answers), output=out.append)
    status = session.run()
    return session, status, "\n".join(out)


class TestMenu:

    def test_exit_immediately(self, system) -> None:
        _, status, text = run_session(system, 1, ["0"])
        assert status == 0
        assert text.endswith("Simulator finished.")
        assert "### MMU ###" not in text

    def test_process_panel_lists_every_tcb(self, system) -> None:
        _, _, text = run_session(system, 2, ["0"])
        assert "Active process: P2" in text
        assert "TCB P1 (PTBR: 0x0000)" in text
        assert "TCB P2 (PTBR: 0x0100)" in text
        assert "TCB P3 (PTBR: 0x0200)" in text

    def test_access_variable(self, system) -> None:
        session, status, text = run_session(system, 1, ["2", "1", "0"])
        assert status == 0
        assert "(8 * 1024) + 200 = 8392" in text
        assert "Frame  8 (0x2000): [     P1      ] <--- ACCESS" in text
        assert session.event_log[-1] == "P1: 0x04C8 -> 0x20C8 (page 1 -> frame 8)"

    def test_page_table_frame_shown_during_lookup(self, system) -> None:
        _, _, text = run_session(system, 1, ["2", "0", "0"])
        assert "Frame  0 (0x0000): [ PAGE TABLES ] <--- ACCESS" in text

    def test_switch_process_changes_translation(self, system) -> None:
        session, status, text = run_session(system, 1, ["1", "2", "2", "0", "0"])
        assert session.active.pid == 2
        assert "Active process is now P2." in text
        assert "(1 * 1024) + 100 = 1124" in text

    def test_switch_to_unknown_process_keeps_active(self, system) -> None:
        session, _, text = run_session(system, 3, ["1", "7", "0"])
        assert session.active.pid == 3
        assert "Invalid process. Keeping P3." in text

    def test_invalid_variable(self, system) -> None:
        _, status, text = run_session(system, 1, ["2", "4", "0"])
        assert status == 0
        assert "Invalid variable/page." in text

    def test_non_numeric_choice_reprompts(self, system) -> None:
        _, status, text = run_session(system, 1, ["abc", "0"])
        assert status == 0
        assert "Error: invalid input. Try again." in text

    def test_unknown_option(self, system) -> None:
        _, _, text = run_session(system, 1, ["9", "0"])
        assert "Invalid option." in text

    def test_view_ram(self, system) -> None:
        _, _, text = run_session(system, 1, ["3", "0"])
        assert "--- RAM (16 KiB) ---" in text
        assert "ACCESS" not in text

    def test_translate_hex_address(self, system) -> None:
        _, _, text = run_session(system, 3, ["4", "0x0C2C", "0"])
        assert "Final physical address: 0x3C2C" in text

    def test_address_out_of_space_reprompts(self, system) -> None:
        session, status, text = run_session(system, 1, ["4", "5000", "0"])
        assert status == 0
        assert "Error: logical address 5000 outside 0..4095" in text
        assert "InvalidLogicalAddress" in session.event_log[-1]

    def test_bad_address_text(self, system) -> None:
        _, _, text = run_session(system, 1, ["4", "hello", "0"])
        assert "Error: invalid address. Try again." in text

    def test_eof_ends_session(self, system) -> None:
        _, status, text = run_session(system, 1, ["3"])
        assert status == 0
        assert text.endswith("Simulator finished.")


class TestFatalErrors:

    def test_corrupt_entry_aborts(self) -> None:
        memory = PhysicalMemory(1024, 16)
        memory.initialize({0: 99})
        system = PagingSystem(
            memory,
            FrameOwnership([FREE] * 16),
            ProcessTable([ProcessDescriptor(1, 0)], 4),
        )
        _, status, text = run_session(system, 1, ["4", "10", "0"])
        assert status == 1
        assert "FATAL: FrameOutOfRange" in text
        assert "Simulator aborted" in text


class TestMain:

    def test_unknown_initial_process(self) -> None:
        with pytest.raises(SystemExit):
            main(["--process", "9"])


class TestSharedEventLog:

    def test_session_appends_to_system_log(self, system) -> None:
        session, _, _ = run_session(system, 1, ["2", "0", "0"])
        assert session.event_log is system.event_log
        assert system.event_log[0] == "Initializing system..."
        assert system.event_log[-1] == "P1: 0x0064 -> 0x1464 (page 0 -> frame 5)"

    def test_process_switch_is_logged(self, system) -> None:
        run_session(system, 1, ["1", "3", "0"])
        assert system.event_log[-1] == "Active process -> P3"
