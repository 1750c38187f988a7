"""
PassSlot CLI - Command-line interface.

This layer provides the user-facing commands, using the SDK layer for all
operations. It handles:
- Argument parsing
- TTY detection for human vs machine output
- JSON output for piping/automation
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from passslot.core.client import PassSlotError, ValidationError
from passslot.core.types import Pass
from passslot.sdk import PassSlot

# =============================================================================
# Output Helpers
# =============================================================================


def is_tty() -> bool:
    """Check if stdout is a TTY (human) or pipe (machine)."""
    return sys.stdout.isatty()


def json_output(data: Any, pretty: bool = False) -> None:
    """Print JSON output."""
    indent = 2 if pretty or is_tty() else None
    print(json.dumps(data, indent=indent, default=str))


def error_output(error: PassSlotError) -> None:
    """Print error and exit."""
    json_output(error.to_dict())
    sys.exit(1)


def success_output(data: Any) -> None:
    """Print success output."""
    json_output(data)


def table_output(
    headers: list[str],
    rows: list[list[str]],
    widths: list[int],
) -> None:
    """Print a formatted table for human output."""
    header_line = "  ".join(h.ljust(w) for h, w in zip(headers, widths))
    print(header_line)
    print("-" * len(header_line))

    for row in rows:
        print("  ".join(str(v)[:w].ljust(w) for v, w in zip(row, widths)))


def _pass_ref(args: argparse.Namespace) -> Pass:
    return Pass(args.pass_type, args.serial_number)


def _parse_images(specs: list[str] | None) -> dict[str, str]:
    """Parse repeated --image type=path options."""
    images: dict[str, str] = {}
    for spec in specs or []:
        image_type, sep, path = spec.partition("=")
        if not sep or not image_type or not path:
            raise ValidationError(f"Invalid image option '{spec}', expected type=path")
        images[image_type] = path
    return images


def _parse_values(raw: str | None) -> dict[str, Any]:
    """Parse --values as a JSON object, a file (@path) or stdin (-)."""
    if not raw:
        return {}
    if raw == "-":
        raw = sys.stdin.read()
    elif raw.startswith("@"):
        try:
            raw = Path(raw[1:]).read_text()
        except FileNotFoundError:
            raise ValidationError(f"File not found: {raw[1:]}")
    try:
        values = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}")
    if not isinstance(values, dict):
        raise ValidationError("Values must be a JSON object")
    return values


def _write_or_print(data: bytes, output: str | None, label: str) -> None:
    if output:
        Path(output).write_bytes(data)
        success_output({"success": True, "message": f"{label} written to {output}", "size": len(data)})
    else:
        sys.stdout.buffer.write(data)
        sys.stdout.flush()


# =============================================================================
# Template Commands
# =============================================================================


def cmd_templates_list(client: PassSlot, _args: argparse.Namespace) -> None:
    """List templates."""
    try:
        templates = client.templates.list()

        if is_tty():
            if not templates.data:
                print("No templates found.")
                return
            table_output(
                ["ID", "Name", "Pass Type"],
                [[str(t.id), t.name, t.pass_type_identifier or ""] for t in templates],
                [12, 40, 40],
            )
        else:
            success_output(
                {
                    "data": [
                        {"id": t.id, "name": t.name, "passType": t.pass_type_identifier} for t in templates
                    ],
                    "total_count": templates.total_count,
                }
            )
    except PassSlotError as e:
        error_output(e)


def cmd_templates_get(client: PassSlot, args: argparse.Namespace) -> None:
    """Get a template by ID."""
    try:
        template = client.templates.get(args.template_id)
        success_output(
            {
                "id": template.id,
                "name": template.name,
                "passType": template.pass_type_identifier,
                "description": template.description,
            }
        )
    except PassSlotError as e:
        error_output(e)


def cmd_templates_images(client: PassSlot, args: argparse.Namespace) -> None:
    """List template images."""
    try:
        images = client.templates.list_images(args.template_id, args.type, args.resolution)
        success_output({"data": [img.__dict__ for img in images]})
    except PassSlotError as e:
        error_output(e)


def cmd_templates_restrictions(client: PassSlot, args: argparse.Namespace) -> None:
    """Show template restrictions."""
    try:
        success_output(client.templates.get_restrictions(args.template_id).to_dict())
    except PassSlotError as e:
        error_output(e)


# =============================================================================
# Pass Commands
# =============================================================================


def cmd_passes_list(client: PassSlot, args: argparse.Namespace) -> None:
    """List passes."""
    try:
        passes = client.passes.list(args.type)

        if is_tty():
            if not passes.data:
                print("No passes found.")
                return
            table_output(
                ["Pass Type", "Serial Number"],
                [[p.pass_type_identifier, p.serial_number] for p in passes],
                [40, 40],
            )
        else:
            success_output({"data": [p.to_dict() for p in passes], "total_count": passes.total_count})
    except PassSlotError as e:
        error_output(e)


def cmd_passes_create(client: PassSlot, args: argparse.Namespace) -> None:
    """Create a pass from a template."""
    try:
        values = _parse_values(args.values)
        images = _parse_images(args.image)
        if args.by_name:
            created = client.passes.create_with_name(args.template, values, images)
        else:
            created = client.passes.create(args.template, values, images)

        result = created.to_dict()
        if created.skipped_images:
            result["skipped_images"] = [s.to_dict() for s in created.skipped_images]
        success_output(result)
    except PassSlotError as e:
        error_output(e)


def cmd_passes_get(client: PassSlot, args: argparse.Namespace) -> None:
    """Show the pass.json of a pass."""
    try:
        fetched = client.passes.get(args.pass_type, args.serial_number)
        json_output(fetched.pass_json, pretty=True)
    except PassSlotError as e:
        error_output(e)


def cmd_passes_download(client: PassSlot, args: argparse.Namespace) -> None:
    """Download the .pkpass file."""
    try:
        _write_or_print(client.passes.download(_pass_ref(args)), args.output, "Pass")
    except PassSlotError as e:
        error_output(e)


def cmd_passes_url(client: PassSlot, args: argparse.Namespace) -> None:
    """Print the pass preview URL."""
    try:
        success_output({"url": client.passes.get_url(_pass_ref(args))})
    except PassSlotError as e:
        error_output(e)


def cmd_passes_values(client: PassSlot, args: argparse.Namespace) -> None:
    """Show or update pass values."""
    try:
        ref = _pass_ref(args)
        if args.set:
            client.passes.update_values(ref, _parse_values(args.set))
        success_output(client.passes.get_values(ref))
    except PassSlotError as e:
        error_output(e)


def cmd_passes_status(client: PassSlot, args: argparse.Namespace) -> None:
    """Show or update pass status."""
    try:
        ref = _pass_ref(args)
        if args.set:
            status = client.passes.update_status(ref, args.set)
        else:
            status = client.passes.get_status(ref)
        success_output({"status": status})
    except PassSlotError as e:
        error_output(e)


def cmd_passes_push(client: PassSlot, args: argparse.Namespace) -> None:
    """Push an update to a pass."""
    try:
        success_output({"success": client.passes.push(_pass_ref(args))})
    except PassSlotError as e:
        error_output(e)


def cmd_passes_email(client: PassSlot, args: argparse.Namespace) -> None:
    """Email a pass."""
    try:
        client.passes.email(_pass_ref(args), args.address)
        success_output({"success": True, "message": f"Pass sent to {args.address}"})
    except PassSlotError as e:
        error_output(e)


def cmd_passes_delete(client: PassSlot, args: argparse.Namespace) -> None:
    """Delete a pass."""
    try:
        success_output({"success": client.passes.delete(_pass_ref(args))})
    except PassSlotError as e:
        error_output(e)


def cmd_passes_image_save(client: PassSlot, args: argparse.Namespace) -> None:
    """Save one image of a pass."""
    try:
        client.passes.save_image(_pass_ref(args), args.image_type, args.resolution, args.path)
        success_output({"success": True, "message": f"Image {args.image_type}/{args.resolution} saved"})
    except PassSlotError as e:
        error_output(e)


# =============================================================================
# Main CLI
# =============================================================================


def _add_pass_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("pass_type", help="Pass type identifier")
    parser.add_argument("serial_number", help="Pass serial number")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="passslot",
        description="PassSlot CLI - Command-line interface for the PassSlot API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  passslot templates list
  passslot passes create 6008004 --values '{"Name": "John"}' --image thumbnail=john.png
  passslot passes download pass.slot.coupon <serial> -o coupon.pkpass
  passslot passes list --type pass.slot.coupon | jq '.data[].serialNumber'
""",
    )
    parser.add_argument("--base-url", help="API base URL (overrides PASSSLOT_BASE_URL)")
    parser.add_argument("--debug", action="store_true", help="Log HTTP requests to stderr")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ========== Templates ==========
    templates = subparsers.add_parser("templates", help="List and inspect templates")
    templates.set_defaults(func=lambda _c, _a: templates.print_help())
    templates_sub = templates.add_subparsers(dest="subcommand")

    t_list = templates_sub.add_parser("list", help="List templates")
    t_list.set_defaults(func=cmd_templates_list)

    t_get = templates_sub.add_parser("get", help="Get template details")
    t_get.add_argument("template_id", help="Template ID")
    t_get.set_defaults(func=cmd_templates_get)

    t_images = templates_sub.add_parser("images", help="List template images")
    t_images.add_argument("template_id", help="Template ID")
    t_images.add_argument("--type", "-t", help="Image type filter")
    t_images.add_argument("--resolution", "-r", help="Image resolution filter")
    t_images.set_defaults(func=cmd_templates_images)

    t_restrictions = templates_sub.add_parser("restrictions", help="Show template restrictions")
    t_restrictions.add_argument("template_id", help="Template ID")
    t_restrictions.set_defaults(func=cmd_templates_restrictions)

    # ========== Passes ==========
    passes = subparsers.add_parser("passes", help="Create and manage passes")
    passes.set_defaults(func=lambda _c, _a: passes.print_help())
    passes_sub = passes.add_subparsers(dest="subcommand")

    p_list = passes_sub.add_parser("list", help="List passes")
    p_list.add_argument("--type", "-t", help="Pass type identifier filter")
    p_list.set_defaults(func=cmd_passes_list)

    p_create = passes_sub.add_parser("create", help="Create a pass from a template")
    p_create.add_argument("template", help="Template ID (or name with --by-name)")
    p_create.add_argument("--values", "-v", help="JSON object of placeholder values, @file or - for stdin")
    p_create.add_argument("--image", "-i", action="append", help="Image as type=path (repeatable)")
    p_create.add_argument("--by-name", action="store_true", help="Treat template as a template name")
    p_create.set_defaults(func=cmd_passes_create)

    p_get = passes_sub.add_parser("get", help="Show the pass.json of a pass")
    _add_pass_args(p_get)
    p_get.set_defaults(func=cmd_passes_get)

    p_download = passes_sub.add_parser("download", help="Download the .pkpass file")
    _add_pass_args(p_download)
    p_download.add_argument("--output", "-o", help="Output file (default: stdout)")
    p_download.set_defaults(func=cmd_passes_download)

    p_url = passes_sub.add_parser("url", help="Print the pass preview URL")
    _add_pass_args(p_url)
    p_url.set_defaults(func=cmd_passes_url)

    p_values = passes_sub.add_parser("values", help="Show or update placeholder values")
    _add_pass_args(p_values)
    p_values.add_argument("--set", "-s", help="JSON object of new values, @file or - for stdin")
    p_values.set_defaults(func=cmd_passes_values)

    p_status = passes_sub.add_parser("status", help="Show or update the pass status")
    _add_pass_args(p_status)
    p_status.add_argument("--set", "-s", help="New status")
    p_status.set_defaults(func=cmd_passes_status)

    p_push = passes_sub.add_parser("push", help="Push an update to devices")
    _add_pass_args(p_push)
    p_push.set_defaults(func=cmd_passes_push)

    p_email = passes_sub.add_parser("email", help="Email a pass")
    _add_pass_args(p_email)
    p_email.add_argument("address", help="Recipient email address")
    p_email.set_defaults(func=cmd_passes_email)

    p_delete = passes_sub.add_parser("delete", help="Delete a pass")
    _add_pass_args(p_delete)
    p_delete.set_defaults(func=cmd_passes_delete)

    p_image_save = passes_sub.add_parser("image-save", help="Create or replace a pass image")
    _add_pass_args(p_image_save)
    p_image_save.add_argument("image_type", help="Image type (icon, logo, strip, thumbnail, background, footer)")
    p_image_save.add_argument("resolution", help="Image resolution (e.g. normal)")
    p_image_save.add_argument("path", help="Local image file")
    p_image_save.set_defaults(func=cmd_passes_image_save)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    if args.debug:
        logging.basicConfig(level=logging.INFO, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")

    try:
        client = PassSlot(base_url=args.base_url, debug=args.debug or None)
    except PassSlotError as e:
        error_output(e)
        return

    # Run command (all subparsers have default funcs that print help)
    args.func(client, args)


if __name__ == "__main__":
    main()
