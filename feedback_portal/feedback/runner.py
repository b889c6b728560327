"""
Feedback Runner - Admin triage console for the feedback inbox.

Provides a CLI for:
- Viewing inbox statistics
- Listing feedback by status, newest first
- Reading a single submission
- Drafting a reply with the suggestion service
- Replying to a submission (marks it resolved)

Usage:
    python -m feedback_portal.feedback.runner --interactive
"""

import argparse
import getpass
from typing import Optional

from feedback_portal.config import DATA_DIR, configure_logging
from feedback_portal.exceptions import AuthError, FeedbackNotFoundError, ValidationError
from feedback_portal.feedback import triage
from feedback_portal.feedback.models import FeedbackRecord, StatusFilter
from feedback_portal.feedback.storage import FeedbackStore, open_store
from feedback_portal.session.gate import SessionGate
from feedback_portal.suggestions.service import SuggestionService


class FeedbackRunner:
    """
    Interactive triage session for one admin.

    Every operation goes through the session gate, so the runner refuses
    to do anything until login() has succeeded.
    """

    def __init__(
        self,
        store: Optional[FeedbackStore] = None,
        suggestions: Optional[SuggestionService] = None,
        gate: Optional[SessionGate] = None,
    ):
        self.store = store if store is not None else open_store(DATA_DIR)
        self.suggestions = suggestions or SuggestionService()
        self.gate = gate or SessionGate()
        self.drafts: dict[str, str] = {}

    def login(self, username: str, password: str) -> bool:
        try:
            self.gate.login(username, password)
        except AuthError as e:
            print(f"Error: {e}")
            return False
        return True

    def logout(self):
        self.gate.logout()
        self.drafts.clear()

    def inbox(self, status_filter: str = "ALL") -> list[FeedbackRecord]:
        self.gate.require_admin()
        return triage.list_feedback(self.store.all(), status_filter)

    def show(self, feedback_id: str) -> FeedbackRecord:
        self.gate.require_admin()
        return self.store.require(feedback_id)

    def suggest(self, feedback_id: str) -> str:
        """Draft a reply; the latest draft for a record replaces any earlier one."""
        record = self.show(feedback_id)
        text = triage.request_suggestion(record, self.suggestions)
        self.drafts[feedback_id] = text
        return text

    def reply(self, feedback_id: str, text: str) -> Optional[FeedbackRecord]:
        """Reply and persist. An empty reply does nothing and returns None."""
        record = self.show(feedback_id)
        if not (text or "").strip():
            return None
        updated = triage.reply(record, text)
        self.store.replace(updated)
        self.drafts.pop(feedback_id, None)
        return updated

    def stats(self) -> dict:
        self.gate.require_admin()
        return triage.summarize(self.store.all())

    def interactive(self):
        """Run the interactive triage loop."""
        print("\n" + "=" * 60)
        print("Hospital Feedback - Admin Triage")
        print("=" * 60)
        print("\nCommands:")
        print("  'list [ALL|PENDING|RESOLVED]' - Show the inbox")
        print("  'show <id>' - Read one submission")
        print("  'suggest <id>' - Draft a reply")
        print("  'reply <id>' - Write and send a reply")
        print("  'stats' - Show inbox statistics")
        print("  'quit' - Log out and exit\n")

        if not self.suggestions.is_available():
            print("Warning: suggestion model not available, drafts will use the standard reply.\n")

        while True:
            try:
                user_input = input("> ").strip()
            except (KeyboardInterrupt, EOFError):
                print("\nGoodbye!")
                break

            if not user_input:
                continue

            command, _, arg = user_input.partition(" ")
            command = command.lower()
            arg = arg.strip()

            if command in ("quit", "exit", "q"):
                print("Goodbye!")
                break

            try:
                if command == "list":
                    self._show_list(arg or "ALL")
                elif command == "show" and arg:
                    _print_record(self.show(arg))
                elif command == "suggest" and arg:
                    print("\nDrafting...")
                    print(f"\n{self.suggest(arg)}\n")
                elif command == "reply" and arg:
                    self._reply_prompt(arg)
                elif command == "stats":
                    self._show_stats()
                else:
                    print("Unknown command.")
            except (FeedbackNotFoundError, ValidationError, ValueError) as e:
                print(f"Error: {e}")

        self.logout()

    def _reply_prompt(self, feedback_id: str):
        record = self.show(feedback_id)
        draft = self.drafts.get(feedback_id)
        if draft:
            print(f"\nDraft:\n{draft}\n")
            print("Press Enter to send the draft, or type a new reply.")
        text = input("Reply: ").strip() or (draft or "")
        updated = self.reply(record.id, text)
        if updated is None:
            print("Empty reply, nothing sent.")
        else:
            print(f"Reply sent at {updated.replied_at}.")

    def _show_list(self, status_filter: str):
        records = self.inbox(status_filter.upper())
        print(f"\n{len(records)} feedback ({status_filter.upper()}):")
        print("-" * 60)
        for r in records:
            print(f"[{r.id}] {r.status.value:<8} {r.date} {r.time}  {r.department}")
            print(f"  {r.full_name}: {r.content[:60]}")
        print()

    def _show_stats(self):
        """Display inbox statistics."""
        stats = self.stats()
        print("\nFeedback Statistics")
        print("=" * 40)
        print(f"Total: {stats['total']}")
        print(f"Pending: {stats['pending']}")
        print(f"Resolved: {stats['resolved']}")
        print(f"\nBy department:")
        for department, count in sorted(stats["by_department"].items()):
            print(f"  {department}: {count}")


def _print_record(record: FeedbackRecord):
    print("\n" + "-" * 60)
    print(f"[{record.id}] {record.status.value}")
    print(f"Name: {record.full_name}")
    if record.phone_number:
        print(f"Phone: {record.phone_number}")
    print(f"Department: {record.department}")
    print(f"Visit: {record.date} | {record.time}")
    print(f"Images: {len(record.images)}")
    print(f"\n{record.content}\n")
    if record.admin_reply:
        print(f"Reply ({record.replied_at}):\n{record.admin_reply}")
    print("-" * 60)


def main(argv: Optional[list[str]] = None):
    parser = argparse.ArgumentParser(description="Hospital Feedback Admin Console")
    parser.add_argument("--interactive", "-i", action="store_true", help="Interactive mode")
    parser.add_argument("--username", "-u", type=str, help="Admin username")
    parser.add_argument("--password", "-p", type=str, help="Admin password (prompted if omitted)")
    parser.add_argument("--stats", action="store_true", help="Show statistics")
    parser.add_argument("--list", nargs="?", const="ALL", choices=[f.value for f in StatusFilter], help="List feedback")
    parser.add_argument("--show", type=str, metavar="ID", help="Show one submission")
    parser.add_argument("--suggest", type=str, metavar="ID", help="Draft a reply")
    parser.add_argument("--reply", nargs=2, metavar=("ID", "TEXT"), help="Reply to a submission")

    args = parser.parse_args(argv)

    if not any([args.interactive, args.stats, args.list, args.show, args.suggest, args.reply]):
        parser.print_help()
        raise SystemExit(0)

    configure_logging()
    runner = FeedbackRunner()

    username = args.username or input("Username: ").strip()
    password = args.password or getpass.getpass("Password: ")
    if not runner.login(username, password):
        raise SystemExit(1)

    try:
        if args.interactive:
            runner.interactive()
        elif args.stats:
            runner._show_stats()
        elif args.list:
            runner._show_list(args.list)
        elif args.show:
            _print_record(runner.show(args.show))
        elif args.suggest:
            print(runner.suggest(args.suggest))
        elif args.reply:
            updated = runner.reply(*args.reply)
            if updated is None:
                print("Empty reply, nothing sent.")
            else:
                print(f"Replied to {updated.id} at {updated.replied_at}")
    except FeedbackNotFoundError as e:
        print(f"Error: {e}")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
