from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

import orjson

from .bootstrap import configure_logging
from .domain.errors import PlanPalError, UpstreamError
from .services import ConversationService, ServiceContext
from .services.http import run_local_server
from .tools import catalog_payload

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="PlanPal command line interface.")
    parser.add_argument("--log-level", default=None, help="Override PLANPAL_LOG_LEVEL.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    api_parser = subparsers.add_parser("api", help="Start the FastAPI server.")
    api_parser.add_argument("--host", default="127.0.0.1")
    api_parser.add_argument("--port", type=int, default=8000)

    chat_parser = subparsers.add_parser("chat", help="Chat with the assistant in the terminal.")
    chat_parser.add_argument("--user", required=True, help="Owner id the conversation belongs to.")
    chat_parser.add_argument("--conversation", default=None, help="Continue an existing conversation.")

    subparsers.add_parser("tools", help="Print the tool catalog as JSON.")

    return parser


def run_chat(context: ServiceContext, owner_id: str, conversation_id: Optional[str] = None) -> None:
    service = ConversationService(context)
    conversation = service.get(owner_id, conversation_id) if conversation_id else service.create(owner_id)
    print(f"Conversation {conversation.id} ({context.backend} store). Empty line or Ctrl-D to quit.")
    while True:
        try:
            text = input("you> ").strip()
        except EOFError:
            break
        if not text:
            break
        try:
            result = service.send(owner_id, conversation.id, text)
        except UpstreamError as exc:
            print(f"[error] {exc}")
            continue
        print(f"planpal> {result.assistant_message.content}\n")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "tools":
        print(orjson.dumps(catalog_payload(), option=orjson.OPT_INDENT_2).decode())
        return 0

    configure_logging(level=args.log_level, to_file=args.command == "api")
    logger.info("PlanPal CLI starting: %s", args.command)

    if args.command == "api":
        run_local_server(host=args.host, port=args.port)
    elif args.command == "chat":
        try:
            run_chat(ServiceContext(), args.user, args.conversation)
        except PlanPalError as exc:
            logger.error("Chat session ended: %s", exc)
            return 1
    else:  # pragma: no cover - argparse enforces choices
        parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
