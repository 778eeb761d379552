#!/usr/bin/env python3
"""
Script CLI d'administration de la file hors-ligne des séries
Utile pour diagnostiquer une file bloquée, forcer une synchronisation ou purger
la file lors d'une déconnexion / réinitialisation de compte.
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Ajouter le répertoire parent au path pour les imports
sys.path.append(str(Path(__file__).parent.parent))

from app.core.settings import get_settings
from app.domain.services.offline_write_buffer import OfflineWriteBuffer, create_offline_buffer

# Configuration du logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def cmd_list(buffer: OfflineWriteBuffer, args: argparse.Namespace) -> int:
    pending = buffer.list_pending()
    print(f"{len(pending)} serie(s) en attente")
    for ps in pending:
        print(f"  {ps.created_at.isoformat()}  {ps.id}  {ps.exercise}  {ps.weight} x {ps.reps}")
    return 0


async def cmd_drain(buffer: OfflineWriteBuffer, args: argparse.Namespace) -> int:
    result = await buffer.drain()
    print(f"Synchronisees: {len(result.flushed)}")
    if not result.completed:
        failed = f"sur {result.failed_id}" if result.failed_id else "(stockage local)"
        print(f"Echec {failed}: {result.error} ({result.remaining} en attente)")
        return 1
    return 0


def cmd_clear(buffer: OfflineWriteBuffer, args: argparse.Namespace) -> int:
    count = buffer.pending_count()
    if count and not args.yes:
        answer = input(f"{count} serie(s) non synchronisee(s) seront perdues. Continuer ? [y/N] ")
        if answer.strip().lower() not in ("y", "yes", "o", "oui"):
            print("Annule")
            return 1
    dropped = buffer.clear()
    print(f"{dropped} serie(s) supprimee(s)")
    return 0


COMMANDS = {"list": cmd_list, "drain": cmd_drain, "clear": cmd_clear}


async def run_command(buffer: OfflineWriteBuffer, args: argparse.Namespace) -> int:
    """Execute la commande puis ferme la file et le client HTTP dans la meme boucle."""
    command = COMMANDS[args.command]
    try:
        if asyncio.iscoroutinefunction(command):
            return await command(buffer, args)
        return command(buffer, args)
    finally:
        await buffer.aclose()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Administration de la file hors-ligne des series")
    parser.add_argument("--path", help="Fichier SQLite local (defaut: OFFLINE_BUFFER_PATH)")
    parser.add_argument("--remote", help="URL de l'API distante (defaut: REMOTE_API_URL)")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("list", help="Lister les series en attente")
    sub.add_parser("drain", help="Synchroniser la file maintenant")
    clear_parser = sub.add_parser("clear", help="Purger la file sans synchroniser")
    clear_parser.add_argument("--yes", action="store_true", help="Ne pas demander de confirmation")
    args = parser.parse_args(argv)

    settings = get_settings()
    if args.path:
        settings.OFFLINE_BUFFER_PATH = args.path
    if args.remote:
        settings.REMOTE_API_URL = args.remote

    buffer = create_offline_buffer(settings)
    buffer.open()
    if buffer.degraded:
        logger.error(f"Impossible d'ouvrir la file locale {settings.OFFLINE_BUFFER_PATH}")
        asyncio.run(buffer.aclose())
        return 2
    return asyncio.run(run_command(buffer, args))


if __name__ == "__main__":
    sys.exit(main())
