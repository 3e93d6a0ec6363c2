"""
Tests for SubprocessRunner
"""

import os
import signal
import sys

import pytest

from psqlw.runner import SubprocessRunner, ignore_interrupts


class TestSubprocessRunner:
    """Test running real child processes"""

    def test_exit_code(self):
        """Test the child's exit status is returned"""
        result = SubprocessRunner().run(sys.executable, ["-c", "raise SystemExit(7)"])
        assert result.returncode == 7
        assert result.stdout is None

    def test_capture_output(self):
        """Test stdout is captured as bytes"""
        result = SubprocessRunner().run(
            sys.executable,
            ["-c", "import sys; print(sys.argv[1])", "alice"],
            capture_output=True,
        )
        assert result.returncode == 0
        assert result.stdout == b"alice\n"

    def test_capture_output_is_raw(self):
        """Test carriage returns and non-UTF-8 bytes are not translated"""
        result = SubprocessRunner().run(
            sys.executable,
            ["-c", r"import sys; sys.stdout.buffer.write(b'a\rb\r\n\xff')"],
            capture_output=True,
        )
        assert result.stdout == b"a\rb\r\n\xff"

    def test_env_passed_to_child(self):
        """Test the given environment replaces the inherited one"""
        env = dict(os.environ, PSQLW_TEST_VALUE="from-parent")
        result = SubprocessRunner().run(
            sys.executable,
            ["-c", "import os; print(os.environ['PSQLW_TEST_VALUE'])"],
            env=env,
            capture_output=True,
        )
        assert result.stdout.strip() == b"from-parent"

    def test_missing_command_raises(self, tmp_path):
        """Test OSError when the executable does not exist"""
        with pytest.raises(OSError):
            SubprocessRunner().run(str(tmp_path / "no-such-command"), [])

    @pytest.mark.skipif(os.name != "posix", reason="POSIX signals")
    def test_signal_death_is_negative(self):
        """Test a child killed by a signal reports a negative status"""
        result = SubprocessRunner().run(
            sys.executable, ["-c", "import os, signal; os.kill(os.getpid(), signal.SIGTERM)"]
        )
        assert result.returncode == -signal.SIGTERM


class TestIgnoreInterrupts:
    """Test SIGINT handling while a child runs"""

    def test_handlers_restored(self):
        """Test the previous SIGINT handler is put back"""
        before = signal.getsignal(signal.SIGINT)
        with ignore_interrupts():
            assert signal.getsignal(signal.SIGINT) == signal.SIG_IGN
        assert signal.getsignal(signal.SIGINT) == before

    def test_handlers_restored_on_error(self):
        """Test handlers are restored when the body raises"""
        before = signal.getsignal(signal.SIGINT)
        with pytest.raises(RuntimeError):
            with ignore_interrupts():
                raise RuntimeError("boom")
        assert signal.getsignal(signal.SIGINT) == before
