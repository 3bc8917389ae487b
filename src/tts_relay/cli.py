"""
Command-Line Interface for tts-relay.

Relays text to the speech provider without running the HTTP server, using
the same sanitizer and relay as POST /api/tts.

Usage Examples:
    # Single text
    tts-relay "Hello there" --out hello.mp3

    # Batch: one line per item, numbered files in out_dir/
    tts-relay --file lines.txt --out out_dir/

    # Prosody and voice
    tts-relay --text "Slow and low" --rate 0.8 --pitch 0.9 --voice en-GB-RyanNeural

    # Dry run: sanitize and print the SSML, no network
    tts-relay --text "Test" --dry-run --json

Environment Variables:
    AZURE_SPEECH_KEY: Provider subscription key
    AZURE_SPEECH_REGION: Provider region (e.g. eastus)
    TTS_RELAY_SETTINGS: Settings file (default config/settings.yaml)

Exit Codes:
    0  success
    1  provider failure (token, synthesis, empty audio)
    2  usage error, empty text or missing configuration
"""

from __future__ import annotations

import argparse
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import uuid4

from tts_relay.core.config import ConfigValidationError, load_settings
from tts_relay.core.logging import configure_logging, get_logger, info, set_request_id
from tts_relay.services.errors import RelayError
from tts_relay.services.relay import ProviderCredential, ProviderRelay
from tts_relay.services.sanitizer import sanitize
from tts_relay.services.ssml import build_ssml


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="tts-relay CLI (serverless relay)")

    parser.add_argument("text_pos", nargs="?", help="Text to synthesize (positional)")
    parser.add_argument("--text", help="Text to synthesize")
    parser.add_argument("--file", help="Batch input file (1 line = 1 item)")
    parser.add_argument("--out", help="Output path (file, or dir in batch mode)")

    # Passed through the sanitizer unchanged, like a JSON body would be
    parser.add_argument("--voice", help="Provider voice name")
    parser.add_argument("--rate", help="Speaking rate multiplier (0.5-2.0)")
    parser.add_argument("--pitch", help="Pitch multiplier (0.5-2.0)")
    parser.add_argument("--format", help="Output format profile")

    parser.add_argument("--region", help="Provider region override")
    parser.add_argument("--dry-run", action="store_true",
                        help="Sanitize and print SSML without calling the provider")
    parser.add_argument("--json", action="store_true", help="Print JSON summary")

    return parser.parse_args(argv)


def _load_texts(args: argparse.Namespace) -> List[str]:
    text = args.text or args.text_pos

    if args.file:
        if text:
            raise SystemExit("Use --file without --text or positional text.")
        lines = Path(args.file).read_text(encoding="utf-8").splitlines()
        items = [line.strip() for line in lines if line.strip()]
        if not items:
            raise SystemExit("Input file is empty.")
        return items

    # Missing text is reported by the sanitizer as EMPTY_TEXT
    return [text or ""]


def _resolve_output_paths(args: argparse.Namespace, count: int) -> List[Path]:
    if args.file:
        out_dir = Path(args.out or "out")
        out_dir.mkdir(parents=True, exist_ok=True)
        return [out_dir / f"item_{i + 1:03d}.mp3" for i in range(count)]

    out_path = Path(args.out or "out.mp3")
    out_path.parent.mkdir(parents=True, exist_ok=True)
    return [out_path]


def _raw_body(args: argparse.Namespace, text: str) -> Dict[str, Any]:
    return {
        "text": text,
        "voice": args.voice,
        "rate": args.rate,
        "pitch": args.pitch,
        "format": args.format,
    }


def _emit(payload: Dict[str, Any], as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, ensure_ascii=False))
    else:
        print(payload)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code (see module docstring).
    """
    args = _parse_args(argv)

    configure_logging()
    log = get_logger("tts-relay.cli")
    set_request_id(str(uuid4())[:12])

    settings = load_settings(os.getenv("TTS_RELAY_SETTINGS", "config/settings.yaml"), required=False)
    if args.region:
        settings.raw["provider"] = {**(settings.raw.get("provider") or {}), "region": args.region}
    try:
        config = settings.get_relay_config()
    except ConfigValidationError as e:
        _emit({"ok": False, "error": "Invalid configuration", "details": str(e)}, args.json)
        return 2

    texts = _load_texts(args)

    try:
        requests = [
            sanitize(
                _raw_body(args, t),
                default_voice=config.synthesis.default_voice,
                default_format=config.synthesis.default_format,
            )
            for t in texts
        ]
    except RelayError as e:
        _emit(e.to_dict(), args.json)
        return 2

    if args.dry_run:
        items = [
            {
                "text_len": len(r.text),
                "voice": r.voice,
                "rate": r.rate,
                "pitch": r.pitch,
                "format": r.output_format,
                "ssml": build_ssml(r, config.synthesis.default_language),
            }
            for r in requests
        ]
        info(log, "dry_run", items=len(items))
        _emit({"ok": True, "dry_run": True, "items": items}, args.json)
        print("DRY_RUN_OK")
        return 0

    try:
        credential = ProviderCredential.from_config(config.provider)
    except RelayError as e:
        _emit(e.to_dict(), args.json)
        return 2

    relay = ProviderRelay.from_config(config)
    out_paths = _resolve_output_paths(args, len(requests))
    results = []

    for request, out_path in zip(requests, out_paths):
        info(log, "relay_start", chars=len(request.text), out=str(out_path))
        try:
            result = relay.synthesize(request, credential)
        except RelayError as e:
            _emit(e.to_dict(), args.json)
            return 1
        out_path.write_bytes(result.audio)
        results.append({
            "out": str(out_path),
            "bytes": len(result.audio),
            "format": result.output_format,
            "upstream_request_id": result.upstream_request_id,
        })

    _emit({"ok": True, "dry_run": False, "items": results}, args.json)
    print("CLI_OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
