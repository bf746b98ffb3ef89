#!/usr/bin/env python3
"""
SEC Change Feed Monitor Dashboard
Provides a quick overview of the detection state left by previous runs
"""

import argparse
import json
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from core.tracker import FilingTracker
from services.storage import JsonFileStore


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class FilingMonitor:
    """Monitor and report on change-feed state"""

    def __init__(self, output_dir="output", now=None):
        self.output_dir = Path(output_dir)
        self.store = JsonFileStore(self.output_dir)
        self._now = now or (lambda: datetime.now(timezone.utc))

    def load_state(self):
        """Load the current detection state"""
        return FilingTracker(self.store).state

    def hours_since_last_run(self, state) -> Optional[float]:
        last_run = _parse_timestamp(state.last_successful_run_at)
        if last_run is None:
            return None
        return (self._now() - last_run).total_seconds() / 3600

    def get_state_stats(self, state) -> Dict:
        """Get statistics about tracked filings"""
        first_seen = [ts for ts in (_parse_timestamp(v) for v in state.seen.values()) if ts]
        by_filer = Counter(key.split(":", 1)[0] for key in state.seen)

        return {
            "tracked_keys": len(state.seen),
            "fingerprinted_keys": len(state.fingerprints),
            "filers": len(by_filer),
            "by_filer": dict(by_filer.most_common()),
            "oldest_first_seen": min(first_seen) if first_seen else None,
            "newest_first_seen": max(first_seen) if first_seen else None,
        }

    def check_alerts(self, state=None) -> List[str]:
        """Check for conditions that should trigger alerts"""
        state = state or self.load_state()
        alerts = []

        hours_ago = self.hours_since_last_run(state)
        if hours_ago is None:
            alerts.append("WARNING: No successful run recorded")
        elif hours_ago > 48:
            alerts.append(f"CRITICAL: No successful run in {hours_ago:.0f} hours")
        elif hours_ago > 24:
            alerts.append(f"WARNING: No successful run in {hours_ago:.0f} hours")

        return alerts

    def print_dashboard(self, verbose: bool = False):
        """Print the monitoring dashboard"""
        state = self.load_state()

        if state.first_run and not state.seen:
            print("❌ No detection state found. Run the change feed first.")
            return

        print("SEC Change Feed Monitor")
        print("=" * 60)

        hours_ago = self.hours_since_last_run(state)
        if hours_ago is not None:
            print(f"\n📅 Last Run: {state.last_successful_run_at} ({hours_ago:.1f} hours ago)")

        stats = self.get_state_stats(state)
        print(f"\n📊 State Statistics:")
        print(f"   Tracked filings: {stats['tracked_keys']}")
        print(f"   Fingerprinted:   {stats['fingerprinted_keys']}")
        print(f"   Filers:          {stats['filers']}")
        if stats['oldest_first_seen'] and stats['newest_first_seen']:
            print(f"   First seen:      {stats['oldest_first_seen'].strftime('%Y-%m-%d')} to "
                  f"{stats['newest_first_seen'].strftime('%Y-%m-%d')}")

        if verbose:
            print(f"\n📋 Filings by Filer:")
            for cik, count in stats['by_filer'].items():
                print(f"   {cik} {count:5d}")

        alerts = self.check_alerts(state)
        print(f"\n💡 Alerts:")
        if alerts:
            for alert in alerts:
                print(f"   {alert}")
        else:
            print("   ✅ System is up to date!")

        print("\n" + "=" * 60)

    def export_metrics(self, output_file: str = "metrics.json"):
        """Export metrics for external monitoring"""
        state = self.load_state()
        stats = self.get_state_stats(state)

        metrics = {
            "timestamp": self._now().isoformat(),
            "last_successful_run_at": state.last_successful_run_at,
            "hours_since_last_run": self.hours_since_last_run(state),
            "tracked_keys": stats["tracked_keys"],
            "fingerprinted_keys": stats["fingerprinted_keys"],
            "by_filer": stats["by_filer"],
            "alerts": self.check_alerts(state),
        }

        with open(output_file, 'w') as f:
            json.dump(metrics, f, indent=2)

        print(f"✅ Metrics exported to {output_file}")


def main(argv=None):
    parser = argparse.ArgumentParser(description='Monitor SEC change feed state')
    parser.add_argument('--output-dir', default=None,
                       help='Directory holding STATE.json (default: OUTPUT_DIR)')
    parser.add_argument('--verbose', '-v', action='store_true',
                       help='Show detailed information')
    parser.add_argument('--export', type=str,
                       help='Export metrics to JSON file')
    parser.add_argument('--alerts', action='store_true',
                       help='Check for alert conditions')

    args = parser.parse_args(argv)

    output_dir = args.output_dir
    if output_dir is None:
        from utils.config import get_settings
        output_dir = get_settings().output_dir

    monitor = FilingMonitor(output_dir)

    if args.alerts:
        alerts = monitor.check_alerts()
        if alerts:
            print("🚨 ALERTS:")
            for alert in alerts:
                print(f"   {alert}")
        else:
            print("✅ No alerts")
    elif args.export:
        monitor.export_metrics(args.export)
    else:
        monitor.print_dashboard(verbose=args.verbose)


if __name__ == "__main__":
    main()
