"""Out-of-band administration for the learning portal.

Usage:
    python -m portal.manage init-db
    python -m portal.manage set-password admin@edu.com 'new-secret'
    python -m portal.manage set-role someone@example.com admin
    python -m portal.manage serve --port 8080
"""
import argparse
import logging
import sys

from portal.bootstrap import ensure_bootstrap_admin, init_db
from portal.database import SessionLocal, engine
from portal.models.user import Role
from portal.services.identity import IdentityStore, UnknownUser


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="portal.manage")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init-db", help="create tables and the bootstrap admin")

    set_password = commands.add_parser("set-password", help="replace a user's password")
    set_password.add_argument("email")
    set_password.add_argument("password")

    set_role = commands.add_parser("set-role", help="promote or demote a user")
    set_role.add_argument("email")
    set_role.add_argument("role", choices=[role.value for role in Role])

    serve = commands.add_parser("serve", help="run the web server")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8080)
    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        import uvicorn

        uvicorn.run("portal.main:app", host=args.host, port=args.port)
        return 0

    init_db(engine)
    db = SessionLocal()
    try:
        if args.command == "init-db":
            ensure_bootstrap_admin(db)
        elif args.command == "set-password":
            IdentityStore(db).set_password(args.email, args.password)
            print(f"Password updated for {args.email}")
        elif args.command == "set-role":
            IdentityStore(db).set_role(args.email, Role(args.role))
            print(f"{args.email} is now {args.role}")
    except UnknownUser as exc:
        print(f"No user with email {exc}", file=sys.stderr)
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
