#!/usr/bin/env python3
"""Simple CLI for running and chatting with Solchat locally"""

import argparse
import asyncio
from typing import Optional

from solchat.client import ChatMessage, ChatSession
from solchat.config import settings
from solchat.core.errors import ValidationError, WalletError
from solchat.services.address import require_solana_address
from solchat.types import ChartPayload


class WatchOnlyWallet:
    """Wallet adapter for the terminal: knows the address, cannot sign."""

    def __init__(self, address: str):
        self.public_key: Optional[str] = address
        self.connected = True

    async def send_transaction(self, transaction, rpc) -> str:
        raise WalletError("This terminal wallet is watch-only and cannot sign. Use a browser wallet to approve.")


def print_message(message: ChatMessage) -> None:
    """Pretty print one chat message"""
    if message.role == "user":
        return

    if isinstance(message.content, ChartPayload):
        chart = message.content
        print(f"\n📈 {chart.title}")
        if chart.values:
            print(f"   {chart.labels[0]}: {chart.values[0]:,.6f}  →  {chart.labels[-1]}: {chart.values[-1]:,.6f}")
        for series in chart.series or []:
            if series.data:
                print(f"   {series.name}: {series.data[-1]:+.2f}% over the window")
        return

    prefix = "🔧" if message.is_tool_response else "🤖"
    print(f"\n{prefix} {message.content}")


async def cli_chat(address: str, server_url: Optional[str] = None):
    """Interactive chat mode"""
    session = ChatSession(WatchOnlyWallet(address), server_url=server_url)

    print("🤖 Solchat")
    print(f"Wallet: {address} (watch-only)")
    print("Type 'exit' to quit, 'help' for commands")
    print("-" * 40)

    while True:
        try:
            user_input = input("\n💬 You: ").strip()

            if user_input.lower() in ['exit', 'quit', 'q']:
                print("Goodbye! 👋")
                break

            elif user_input.lower() in ['help', 'h']:
                print("\nCommands:")
                print("  help  - Show this help")
                print("  exit  - Quit the chat")
                print("  clear - Clear chat history")
                print("  Try: 'Check my SOL balance', 'Price of BONK', 'Compare SOL and JUP over 30 days'")
                continue

            elif user_input.lower() == 'clear':
                session.state.messages.clear()
                print("Chat history cleared.")
                continue

            elif not user_input:
                continue

            start = len(session.state.messages)
            await session.send_prompt(user_input)
            await session.executor.drain()

            for message in session.state.messages[start:]:
                print_message(message)

        except KeyboardInterrupt:
            print("\nGoodbye! 👋")
            break


def cli_serve(host: Optional[str], port: Optional[int], reload: bool):
    import uvicorn

    uvicorn.run(
        "solchat.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Solchat CLI")
    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", help=f"Bind address (default: {settings.host})")
    serve_parser.add_argument("--port", type=int, help=f"Port (default: {settings.port})")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    chat_parser = subparsers.add_parser("chat", help="Interactive chat mode")
    chat_parser.add_argument("wallet", help="Solana wallet address to chat as")
    chat_parser.add_argument("--server", help=f"Server URL (default: {settings.server_url})")

    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    if args.command == "serve":
        cli_serve(args.host, args.port, args.reload)
    elif args.command == "chat":
        try:
            address = require_solana_address(args.wallet, "wallet address")
        except ValidationError as exc:
            parser.error(str(exc))
        asyncio.run(cli_chat(address, args.server))


if __name__ == "__main__":
    main()
