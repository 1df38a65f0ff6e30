#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Wear Compass - heading pipeline runner

Wires the components together for a development session without a watch:
- MockObserver: static / sweeping / replayed sensor stream
- CompassObserver: sensor callbacks -> estimator events
- HeadingEstimator: low-pass + rotation matrix + declination
- NeedleDashboard: optional OpenCV needle display

Usage:
    wear-compass --mode synthetic --rotation-rate 45 --duration 10
    wear-compass --heading 120 --lat 40.42 --lon -3.70 --dashboard
    wear-compass --mode replay --replay data/walk.csv
"""

import argparse
import time
from pathlib import Path
from typing import List, Optional

from compass.imu.heading_estimator import HeadingEstimator
from compass.imu.orientation import bearing_to_direction
from compass.location.declination import DeclinationResolver, LocationFix
from compass.mock_observer import MODES, MockObserver
from compass.observer import CompassObserver
from compass.telemetry.loggers.compass_logger import close_compass_logger, get_compass_logger
from compass.telemetry.telemetry_logger import TelemetryLogger
from compass.utils.config import Config
from compass.utils.ctrl_handler import CtrlCHandler


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Wear Compass heading pipeline (mock sensors)")
    ap.add_argument("--mode", choices=MODES, default=Config.MOCK_MODE, help="Mock sensor mode")
    ap.add_argument("--heading", type=float, default=Config.MOCK_HEADING_DEG, help="Simulated magnetic heading (deg)")
    ap.add_argument("--rotation-rate", type=float, default=Config.MOCK_ROTATION_RATE_DEG_S, help="Sweep rate in synthetic mode (deg/s)")
    ap.add_argument("--rate", type=float, default=Config.MOCK_RATE_HZ, help="Sample pairs per second")
    ap.add_argument("--noise", type=float, default=Config.MOCK_NOISE_STD, help="Gaussian noise std per component")
    ap.add_argument("--replay", default=None, help="CSV sample log for replay mode")
    ap.add_argument("--lat", type=float, default=None, help="Latitude for declination (deg)")
    ap.add_argument("--lon", type=float, default=None, help="Longitude for declination (deg)")
    ap.add_argument("--alt", type=float, default=0.0, help="Altitude for declination (m)")
    ap.add_argument("--duration", type=float, default=0.0, help="Seconds to run (0 = until Ctrl+C)")
    ap.add_argument("--dashboard", action="store_true", help="Show the OpenCV needle dashboard")
    ap.add_argument("--log-dir", default=Config.LOG_DIR, help="Base directory for session logs")
    ap.add_argument("--no-telemetry", action="store_true", help="Disable JSONL telemetry")
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    print("=" * 60)
    print("Wear Compass - heading pipeline".center(60))
    print("=" * 60)

    ctrl_handler = CtrlCHandler()
    telemetry = None
    mock = None
    dashboard = None
    resolver = None

    try:
        session_dir = None
        if Config.TELEMETRY_ENABLED and not args.no_telemetry:
            telemetry = TelemetryLogger(output_dir=Path(args.log_dir))
            session_dir = telemetry.get_session_dir()
            print(f"[MAIN] Telemetry session: {session_dir}")
        get_compass_logger(session_dir=session_dir or Path(args.log_dir))

        estimator = HeadingEstimator(telemetry=telemetry)
        if Config.DECLINATION_ENABLED:
            resolver = DeclinationResolver(sink=estimator.post, telemetry=telemetry)
        observer = CompassObserver(estimator, resolver=resolver, async_declination=Config.DECLINATION_ASYNC)

        mock = MockObserver(
            observer,
            mode=args.mode,
            rate_hz=args.rate,
            heading=args.heading,
            rotation_rate=args.rotation_rate,
            noise_std=args.noise,
            replay_path=args.replay,
        )

        if args.dashboard:
            # cv2 only loaded when the dashboard is requested
            from compass.presentation.needle_dashboard import NeedleDashboard
            dashboard = NeedleDashboard()

        mock.start()

        if args.lat is not None and args.lon is not None:
            observer.on_location_received(
                LocationFix(args.lat, args.lon, args.alt, time.time() * 1000.0)
            )
        else:
            print("[MAIN] No location given - reporting magnetic bearing")

        start = time.time()
        last_print = 0.0
        while not ctrl_handler.should_stop:
            now = time.time()
            if args.duration > 0 and now - start >= args.duration:
                break

            state = estimator.state()
            if state is not None and now - last_print >= Config.BEARING_PRINT_INTERVAL:
                decl = "n/a" if state.declination_degrees is None else f"{state.declination_degrees:+.2f}"
                print(f"bearing={state.bearing:6.1f}° ({bearing_to_direction(state.bearing):>2})  "
                      f"magnetic={state.magnetic_bearing:6.1f}°  decl={decl}")
                last_print = now

            if dashboard is not None:
                frame = dashboard.render(estimator.bearing, state)
                if not dashboard.show(frame):
                    break

            time.sleep(0.02)

        print("\n[MAIN] Session stats:",
              f"fusions={estimator.fusion_count}",
              f"degenerate={estimator.degenerate_count}",
              f"bearing={estimator.bearing:.1f}°")
        return 0

    except ValueError as e:
        print(f"[MAIN] Configuration error: {e}")
        return 2

    finally:
        if mock is not None:
            mock.stop()
        if resolver is not None:
            resolver.join(timeout=1.0)
        if dashboard is not None:
            dashboard.close()
        if telemetry is not None:
            summary = telemetry.finalize_session()
            print(f"[MAIN] Telemetry summary: {summary['total_fusions']} fusions")
        close_compass_logger()
        ctrl_handler.restore()


if __name__ == "__main__":
    raise SystemExit(main())
