import signal


class CtrlCHandler:
    """
    Handle Ctrl+C so the sensor stream is unregistered and the session
    logs are flushed before exit.
    """
    def __init__(self):
        self.should_stop = False
        self._previous = signal.signal(signal.SIGINT, self._signal_handler)

    def _signal_handler(self, sig, frame):
        """Callback executed when Ctrl+C is detected"""
        print("\n[INFO] Interrupt signal detected, stopping compass...")
        self.should_stop = True

    def restore(self):
        """Reinstall the SIGINT handler that was active before this one."""
        signal.signal(signal.SIGINT, self._previous)
