"""
Command line interface of the room juggler.

Reads guests, wishes and rooms from a JSON file, juggles the female and male
guests into their rooms and writes the results to the output directory:
`room_juggler_results.json`, `room_juggler_results.md` and
`annealing_happiness.png`.
"""

import argparse
import logging
import os
import sys

from dotenv import load_dotenv

from roomjuggler.config import JuggleConfig
from roomjuggler.errors import ConfigurationError
from roomjuggler.input_data import load_input
from roomjuggler.job import RoomJugglerJob
from roomjuggler.report import save_annealing_plot, save_results_json, save_results_markdown
from roomjuggler.utils import _project_root, _resolve_path

# Load environment variables from .env file
load_dotenv()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Room Juggler - Assigns guests to rooms, fulfilling as many wishes as possible"
    )
    parser.add_argument("input", type=str, help="Path to the JSON file with guests, wishes and rooms")
    parser.add_argument("--config", type=str, help="Path to JSON file with juggle configuration")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible results")
    parser.add_argument("--n-iter", type=int, help="Iterations per temperature (default: 300)")
    parser.add_argument("--beta", type=float, help="Temperature decrease factor (default: 0.999)")
    parser.add_argument(
        "--parallel",
        action="store_true",
        help="Juggle the female and male guests on two threads",
    )
    parser.add_argument("--progress", action="store_true", help="Show a progress bar")
    parser.add_argument("--no-plot", action="store_true", help="Do not save the annealing plot")
    parser.add_argument(
        "--output-dir",
        type=str,
        default=os.environ.get("ROOMJUGGLER_OUTPUT_DIR"),
        help="Directory to write outputs (default: data/outputs under project root)",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("ROOMJUGGLER_LOG_LEVEL", "INFO"),
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        help="Logging level",
    )
    return parser


def load_config(args: argparse.Namespace) -> JuggleConfig:
    """Juggle configuration from the optional config file with CLI overrides applied."""
    config = JuggleConfig.from_file(_resolve_path(args.config)) if args.config else JuggleConfig()
    overrides = {
        name: value
        for name, value in (("seed", args.seed), ("n_iter", args.n_iter), ("beta", args.beta))
        if value is not None
    }
    if overrides:
        config = config.replace(**overrides)
    return config


def main(argv=None) -> int:
    """Main function with CLI support."""
    args = build_parser().parse_args(argv)

    # Configure logging
    numeric_level = getattr(logging, args.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )

    try:
        config = load_config(args)
        guests, wishes, rooms = load_input(_resolve_path(args.input))
        job = RoomJugglerJob(guests, wishes, rooms)
    except (ConfigurationError, ValueError, OSError) as e:
        logging.error(f"Error setting up the room juggler job: {e}")
        return 1

    logging.info(repr(job))
    logging.info(
        f"Juggling with {len(config.t_history)} temperatures, {config.n_total_iter} iterations per gender"
    )
    job.juggle(config, parallel=args.parallel, show_progress=args.progress)

    output_dir = (
        _resolve_path(args.output_dir)
        if args.output_dir
        else os.path.join(_project_root(), "data/outputs")
    )
    os.makedirs(output_dir, exist_ok=True)

    results_path = os.path.join(output_dir, "room_juggler_results.json")
    save_results_json(job, results_path)
    logging.info(f"Saved results to {results_path}")

    md_path = os.path.join(output_dir, "room_juggler_results.md")
    save_results_markdown(job, md_path)
    logging.info(f"Saved Markdown summary to {md_path}")

    if not args.no_plot:
        plot_path = os.path.join(output_dir, "annealing_happiness.png")
        try:
            save_annealing_plot(job, plot_path)
            logging.info(f"Saved annealing plot to {plot_path}")
        except Exception as e:
            logging.warning(f"Failed to save annealing plot: {e}")

    stats = job.stats()
    logging.info("=== Room Juggler Solution ===")
    for gender in ("F", "M"):
        s = stats[gender]
        logging.info(
            f"- {gender}: happiness {s['happiness']}/{s['max_happiness']}, "
            f"{s['fulfilled_wishes']}/{s['n_wishes']} wishes fulfilled"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
