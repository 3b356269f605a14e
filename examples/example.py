"""Example usage of ArrivalBoard."""

import logging
import sys
from pathlib import Path

# Add src to path so we can import ledboard
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ledboard import ArrivalBoard, BoardFrame, LoadError

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"


def print_frame(frame: BoardFrame):
    """Print the two sign rows for a frame."""
    name = frame.station.name if frame.station else "Unknown station"
    print(f"\n{name} - {frame.direction_label} ({frame.last_updated.strftime('%H:%M:%S')})")
    print("-" * 40)

    rows = frame.displayed()
    if not rows:
        print("  No upcoming trains")
        return

    for prediction in rows:
        express = " <>" if prediction.is_express else ""
        print(f"  {prediction.rank + 1}. ({prediction.route_id}){express} "
              f"{prediction.destination_name:<28} {prediction.minutes}min")


def main():
    """Load the sample dataset and refresh the board a few times."""
    station_id = sys.argv[1] if len(sys.argv) > 1 else "A20"
    try:
        direction = int(sys.argv[2]) if len(sys.argv) > 2 else None
        board = ArrivalBoard(direction=direction)
    except ValueError as e:
        print(f"Error: {e}")
        print("Direction must be 0 (north) or 1 (south); omit it for both")
        sys.exit(1)

    try:
        board.load_from_files(str(DATA_DIR / "stations.json"), str(DATA_DIR / "departures.json"))
    except LoadError as e:
        logger.error(f"Failed to load dataset: {e}")
        sys.exit(1)

    try:
        station = board.get_station(station_id)
    except ValueError as e:
        print(f"Error: {e}")
        print("Available stations:")
        for s in board.list_stations():
            print(f"  - {s.name} ({s.stop_id})")
        sys.exit(1)

    board.set_station(station.stop_id)

    try:
        board.run(print_frame, iterations=6)
    except KeyboardInterrupt:
        print("\n\nGoodbye!")


if __name__ == "__main__":
    main()
