"""
Mise command-line entry point.
Parses, formats and keys ingredient lines and manages the stored shopping list.
"""

import argparse
import json
import logging
import sys
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import ConflictError, NotFoundError, ServiceValidationError
from domain.mappers import ShoppingMapper
from domain.models import SessionLocal, init_database
from services import ShoppingService
from services.ingredient_formatter import format_ingredient
from services.ingredient_parser import parse_ingredient_line, parse_ingredient_lines
from services.shopping_keys import key_for

_logger = logging.getLogger("mise.main")


def _configure_logging():
    """Setup logging with configured level and format"""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()), format=settings.log_format
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="mise", description=f"{settings.app_name} ingredient tools"
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {settings.app_version}")
    sub = p.add_subparsers(dest="command", required=True)

    parse_cmd = sub.add_parser("parse", help="Parse lines and print them as JSON")
    parse_cmd.add_argument("lines", nargs="+", metavar="LINE")

    format_cmd = sub.add_parser("format", help="Parse lines and print them formatted")
    format_cmd.add_argument("lines", nargs="+", metavar="LINE")
    format_cmd.add_argument("--scale", type=float, default=1.0, help="Multiply quantities")
    format_cmd.add_argument(
        "--no-prep", dest="include_prep", action="store_false", help="Drop preparation notes"
    )

    key_cmd = sub.add_parser("key", help="Print the shopping merge key of each line")
    key_cmd.add_argument("lines", nargs="+", metavar="LINE")

    shop = sub.add_parser("shop", help="Work with the stored shopping list")
    shop_sub = shop.add_subparsers(dest="shop_command", required=True)

    add_cmd = shop_sub.add_parser("add", help="Merge lines into the shopping list")
    add_cmd.add_argument("lines", nargs="+", metavar="LINE")
    add_cmd.add_argument("--recipe-id", type=int, default=None, help="Source recipe id")

    list_cmd = shop_sub.add_parser("list", help="Print the shopping list")
    list_cmd.add_argument("--json", dest="as_json", action="store_true", help="Print JSON")

    done_cmd = shop_sub.add_parser("done", help="Check off an item")
    done_cmd.add_argument("item_id", type=int)
    done_cmd.add_argument("--undo", action="store_true", help="Un-check the item instead")

    remove_cmd = shop_sub.add_parser("remove", help="Delete an item")
    remove_cmd.add_argument("item_id", type=int)

    shop_sub.add_parser("clear", help="Delete all checked-off items")

    sub.add_parser("init-db", help="Create database tables")
    return p


def _print_json(payload):
    print(json.dumps(payload, ensure_ascii=False))


def _run_shop(args, db: Session):
    if args.shop_command == "add":
        if args.recipe_id is not None:
            items = ShoppingService.merge_ingredients(
                db, parse_ingredient_lines(args.lines), recipe_id=args.recipe_id
            )
        else:
            items = [ShoppingService.add_item_from_text(db, line) for line in args.lines]
        for item in items:
            _print_json(ShoppingMapper.to_response(item).model_dump(mode="json"))

    elif args.shop_command == "list":
        responses = [ShoppingMapper.to_response(i) for i in ShoppingService.list_items(db)]
        if args.as_json:
            _print_json([r.model_dump(mode="json") for r in responses])
        else:
            for r in responses:
                mark = "x" if r.done else " "
                category = f"  ({r.category})" if r.category else ""
                print(f"[{mark}] {r.id}: {r.text}{category}")

    elif args.shop_command == "done":
        item = ShoppingService.update_item(db, args.item_id, done=not args.undo)
        _print_json(ShoppingMapper.to_response(item).model_dump(mode="json"))

    elif args.shop_command == "remove":
        ShoppingService.delete_item(db, args.item_id)
        print(f"Removed item {args.item_id}")

    elif args.shop_command == "clear":
        removed = ShoppingService.clear_done(db)
        print(f"Removed {removed} done items")


def main(
    argv: Optional[List[str]] = None,
    session_factory: Optional[Callable[[], Session]] = None,
) -> int:
    """Run the CLI; returns the process exit code"""
    _configure_logging()
    args = build_parser().parse_args(argv)

    if args.command == "parse":
        _print_json([i.to_wire() for i in parse_ingredient_lines(args.lines)])
        return 0

    if args.command == "format":
        for line in args.lines:
            print(
                format_ingredient(
                    parse_ingredient_line(line),
                    scale=args.scale,
                    include_prep=args.include_prep,
                )
            )
        return 0

    if args.command == "key":
        for ingredient in parse_ingredient_lines(args.lines):
            print(key_for(ingredient))
        return 0

    factory = session_factory or SessionLocal
    db = factory()
    try:
        init_database(bind=db.get_bind())
        if args.command == "init-db":
            print("Database tables ready")
            return 0
        _run_shop(args, db)
        return 0
    except (ServiceValidationError, NotFoundError, ConflictError) as e:
        _logger.error(f"{type(e).__name__}: {e.message}")
        print(json.dumps(e.to_dict()), file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
