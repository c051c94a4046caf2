#!/usr/bin/env python3
"""
habit_tracker.py — track daily habits and streaks from the terminal.

Habits are kept in a plain text file, one per line:

    name:completed_today:streak

Usage:
  python habit_tracker.py
  python habit_tracker.py --file ~/habits.txt --verbose
"""

import argparse
import logging
import os
import re
import stat
import sys
import tempfile
from typing import Callable, Iterator, List, Optional, Tuple

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger("habit_tracker")

DATA_FILE = "habits.txt"
FIELD_SEP = ":"

NUMBER_RE = re.compile(r"\+?[0-9]+")

MENU = [
    "1. Add a new habit",
    "2. Mark a habit as completed",
    "3. Mark a habit as incomplete",
    "4. View all habits",
    "5. Remove a habit",
    "6. Exit",
]


# --------------------------------- Errors ---------------------------------- #
class HabitTrackerError(Exception):
    """Base class for habit tracker failures."""


class InvalidHabitName(HabitTrackerError, ValueError):
    """Raised when a habit name cannot be stored in the text format."""


class InvalidStreakValue(HabitTrackerError, ValueError):
    """Raised when a stored streak is not a non-negative integer."""


class InvalidMenuSelection(HabitTrackerError, ValueError):
    """Raised when the menu choice is not a non-negative number."""


class CorruptStore(HabitTrackerError):
    """Raised when the store file cannot be decoded as UTF-8."""


# --------------------------------- Models ---------------------------------- #
class Habit:
    """A named habit with a completion flag and a streak counter."""

    def __init__(self, name: str, completed_today: bool = False, streak: int = 0):
        self.name = name
        self.completed_today = completed_today
        self.streak = streak

    def __eq__(self, other):
        if not isinstance(other, Habit):
            return NotImplemented
        return (self.name, self.completed_today, self.streak) == (
            other.name, other.completed_today, other.streak
        )

    def __repr__(self):
        return f"<Habit {self.name!r} completed_today={self.completed_today} streak={self.streak}>"


class HabitTracker:
    """Ordered collection of habits. Name lookups use the first match."""

    def __init__(self, habits: Optional[List[Habit]] = None):
        self.habits: List[Habit] = list(habits or [])

    def __len__(self):
        return len(self.habits)

    def __iter__(self) -> Iterator[Habit]:
        return iter(self.habits)

    def __eq__(self, other):
        if not isinstance(other, HabitTracker):
            return NotImplemented
        return self.habits == other.habits

    def __repr__(self):
        return f"<HabitTracker {len(self.habits)} habits>"

    def find(self, name: str) -> Optional[Habit]:
        for habit in self.habits:
            if habit.name == name:
                return habit
        return None

    def add_habit(self, name: str) -> Habit:
        """Append a new habit. Duplicate names are allowed."""
        check_name(name)
        habit = Habit(name)
        self.habits.append(habit)
        logger.debug("Added habit %r", name)
        return habit

    def remove_habit(self, name: str) -> bool:
        """Remove the first habit called `name`. Returns False if none matched."""
        for i, habit in enumerate(self.habits):
            if habit.name == name:
                del self.habits[i]
                logger.debug("Removed habit %r", name)
                return True
        return False

    def mark_complete(self, name: str) -> bool:
        habit = self.find(name)
        if habit is None:
            return False
        habit.completed_today = True
        habit.streak += 1
        return True

    def mark_incomplete(self, name: str) -> bool:
        habit = self.find(name)
        if habit is None:
            return False
        habit.completed_today = False
        habit.streak = 0
        return True

    def list_habits(self) -> List[Tuple[str, int]]:
        return [(h.name, h.streak) for h in self.habits]

    def display(self, output_fn: Callable[[str], None] = print) -> None:
        for name, streak in self.list_habits():
            output_fn(f"{quote_name(name)}: Streak: {streak} days")


def quote_name(name: str) -> str:
    escaped = name.replace("\\", "\\\\").replace('"', '\\"').replace("\t", "\\t")
    return f'"{escaped}"'


def check_name(name: str) -> None:
    """Reject names the line format cannot round-trip."""
    if FIELD_SEP in name or "\n" in name or "\r" in name:
        raise InvalidHabitName(f"{name!r} must not contain ':' or line breaks")


# -------------------------------- Encoding --------------------------------- #
def serialize(tracker: HabitTracker) -> str:
    """Encode every habit as `name:true|false:streak`, one line each."""
    return "".join(
        f"{h.name}{FIELD_SEP}{'true' if h.completed_today else 'false'}{FIELD_SEP}{h.streak}\n"
        for h in tracker
    )


def parse_streak(field: str) -> int:
    if not NUMBER_RE.fullmatch(field):
        raise InvalidStreakValue(f"Invalid streak value: {field!r}")
    return int(field)


def deserialize(text: str) -> HabitTracker:
    """
    Decode store text into a tracker.

    Lines without exactly three fields are skipped. A bad streak field
    aborts the whole decode with InvalidStreakValue.
    """
    tracker = HabitTracker()
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    for lineno, line in enumerate(lines, start=1):
        parts = line.rstrip("\r").split(FIELD_SEP)
        if len(parts) != 3:
            logger.debug("Skipping malformed line %d: %r", lineno, line)
            continue
        name, completed, streak = parts
        tracker.habits.append(Habit(name, completed == "true", parse_streak(streak)))
    return tracker


# --------------------------------- Storage --------------------------------- #
def load_data(filename: str = DATA_FILE) -> HabitTracker:
    """Load habits from the store; a missing file gives an empty tracker."""
    try:
        with open(filename, "r", encoding="utf-8", newline="") as f:
            text = f.read()
    except FileNotFoundError:
        logger.info("No habit file at %s, starting fresh", filename)
        return HabitTracker()
    except UnicodeDecodeError as e:
        raise CorruptStore(f"{filename} is not valid UTF-8: {e}") from None
    tracker = deserialize(text)
    logger.debug("Loaded %d habits from %s", len(tracker), filename)
    return tracker


def save_data(tracker: HabitTracker, filename: str = DATA_FILE) -> None:
    """Write the tracker to a temp file and rename it over the store."""
    directory = os.path.dirname(os.path.abspath(filename))
    fd, tmp_path = tempfile.mkstemp(prefix=".habits-", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(serialize(tracker))
        os.chmod(tmp_path, store_mode(filename))
        os.replace(tmp_path, filename)
    except OSError:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise
    logger.debug("Saved %d habits to %s", len(tracker), filename)


def store_mode(filename: str) -> int:
    """Permission bits for a save: keep the existing store's, else the umask default."""
    try:
        return stat.S_IMODE(os.stat(filename).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


# ------------------------------- Main Program ------------------------------ #
def read_choice(input_fn: Callable[[str], str]) -> int:
    try:
        raw = input_fn("Select an option: ")
    except EOFError:
        raise InvalidMenuSelection("No menu selection (end of input)") from None
    choice = raw.strip()
    if not NUMBER_RE.fullmatch(choice):
        raise InvalidMenuSelection(f"Invalid input: {choice!r}")
    return int(choice)


def read_name(prompt: str, input_fn: Callable[[str], str]) -> str:
    try:
        return input_fn(prompt).strip()
    except EOFError:
        raise InvalidMenuSelection("Unable to read habit name (end of input)") from None


def run_menu(
    tracker: HabitTracker,
    filename: str = DATA_FILE,
    input_fn: Optional[Callable[[str], str]] = None,
    output_fn: Optional[Callable[[str], None]] = None,
) -> None:
    """Run the numbered menu until the user exits, saving after each pass."""
    input_fn = input_fn or input
    output_fn = output_fn or print
    while True:
        output_fn("Habit Tracker:")
        for line in MENU:
            output_fn(line)

        choice = read_choice(input_fn)
        if choice == 1:
            name = read_name("Enter habit to add: ", input_fn)
            try:
                tracker.add_habit(name)
            except InvalidHabitName as e:
                output_fn(f"Invalid habit name: {e}")
        elif choice == 2:
            name = read_name("Habit to mark complete: ", input_fn)
            if not tracker.mark_complete(name):
                logger.debug("mark complete: no habit named %r", name)
        elif choice == 3:
            name = read_name("Enter habit to mark incomplete: ", input_fn)
            if not tracker.mark_incomplete(name):
                logger.debug("mark incomplete: no habit named %r", name)
        elif choice == 4:
            tracker.display(output_fn)
        elif choice == 5:
            name = read_name("Enter habit to remove: ", input_fn)
            if tracker.remove_habit(name):
                output_fn("Habit removed")
            else:
                output_fn("Unable to remove habit")
        elif choice == 6:
            output_fn("Quitting...")
            return
        else:
            output_fn("Invalid option!")

        save_data(tracker, filename)


def parse_args(argv):
    p = argparse.ArgumentParser(prog="habit-tracker", description="Track daily habits and streaks")
    p.add_argument(
        "--file",
        default=os.environ.get("HABITS_FILE", DATA_FILE),
        help="habit store path (default: $HABITS_FILE or habits.txt)",
    )
    p.add_argument("--verbose", "-v", action="store_true", help="enable debug logging")
    return p.parse_args(argv)


def main(argv=None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    args = parse_args(argv)
    if args.verbose:
        logger.setLevel(logging.DEBUG)
    try:
        tracker = load_data(args.file)
        run_menu(tracker, args.file)
    except (HabitTrackerError, OSError) as e:
        logger.error("%s", e)
        sys.exit(1)
    return 0


if __name__ == "__main__":
    main()
