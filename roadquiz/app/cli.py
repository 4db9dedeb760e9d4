from __future__ import annotations

"""CLI for roadquiz: a terminal front end over QuizGame."""

import argparse
import logging
import sys
from typing import Callable, Dict, List, Optional

from .. import __version__
from ..config.config import GameConfig, load_config, validate_config
from ..engine.scoring import ScoringEngine
from ..errors import DevToolsDisabledError, EmptyRunError, InvalidTransitionError, OutOfRangeError
from ..progress.kv import JsonDirStore
from ..stats.stats import format_progress, format_run_summary, progress_frame
from ..util.randomness import seed_if_needed
from .game import QuizGame
from .strings import TableTranslator, Translator


def _parse_ratios(values: List[str]) -> Dict[int, float]:
    out: Dict[int, float] = {}
    for token in values or []:
        try:
            chapter, ratio = token.split("=", 1)
            out[int(chapter)] = float(ratio)
        except ValueError:
            raise argparse.ArgumentTypeError(f"Invalid ratio '{token}'. Use chapter=ratio (e.g., 2=0.5)") from None
    return out


def _build_game(args: argparse.Namespace, *, dev: bool = False) -> QuizGame:
    cfg: GameConfig = validate_config(load_config(args.config))
    if dev:
        cfg = cfg.model_copy(update={"dev_tools": True})
    data_dir = args.data_dir or cfg.storage.data_dir
    game = QuizGame(cfg, JsonDirStore(data_dir))
    if game.store.session_only:
        print("WARNING: Saved progress could not be read; this session will not be saved.", file=sys.stderr)
    return game


def play_run(
    engine: ScoringEngine,
    game: QuizGame,
    *,
    ask: Callable[[str], str] = input,
    inform: Callable[[str], None] = print,
    t: Optional[Translator] = None,
) -> None:
    """Drive one run to its end through ask/inform callbacks."""
    t = t or TableTranslator()
    while not engine.is_over:
        s = engine.state
        q = engine.current_question
        options = q.shuffled_options(game.rng)
        inform(f"\nQ{s.current_index + 1}/{engine.total_questions}  lives {s.lives}  combo {s.combo_count}")
        inform(q.text)
        if q.image_ref:
            inform(f"[image: {q.image_ref}]")
        for i, opt in enumerate(options, start=1):
            inform(f"  {i}. {opt}")
        while True:
            raw = ask(f"Answer (1-{len(options)}), 'h' hint: ").strip().lower()
            if raw == "h":
                if engine.use_hint():
                    inform(t("hint", keyword=q.keyword))
                else:
                    inform(t("no_hint"))
                continue
            if raw.isdigit() and 1 <= int(raw) <= len(options):
                break
        choice = options[int(raw) - 1]
        if engine.submit_answer(choice):
            inform(t("correct"))
        else:
            inform(t("incorrect", answer=q.correct_answer))
        if engine.state.is_game_over:
            inform(t("game_over"))
            break
        engine.advance_to_next()


def _report(game: QuizGame, engine: ScoringEngine, t: Translator) -> None:
    summary = game.finish_run(engine)
    print("\nRun Summary:")
    print(format_run_summary(engine))
    if summary.stage is not None and summary.unlocked:
        print(t("stage_clear", grade=summary.result.evaluation.value))
    if summary.new_best:
        print(t("new_best"))
    if summary.chapter_completed is not None:
        print(t("chapter_clear", chapter=summary.chapter_completed))


def main(argv: Optional[List[str]] = None) -> int:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=None, help="Path to YAML config")
    common.add_argument("--data-dir", dest="data_dir", default=None, help="Directory for saved progress")
    common.add_argument("--questions", default=None, help="Question CSV (defaults to the bundled sample)")
    common.add_argument("--explain", action="store_true")
    common.add_argument("--verbose", action="store_true")

    p = argparse.ArgumentParser(prog="roadquiz")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    sub = p.add_subparsers(dest="cmd")

    st = sub.add_parser("stages", parents=[common])
    st.add_argument("--chapter", type=int, default=None)
    sub.add_parser("progress", parents=[common])
    sub.add_parser("bank", parents=[common])
    pl = sub.add_parser("play", parents=[common])
    pl.add_argument("--stage", type=int, default=None, help="Global stage number (default: frontier)")
    rv = sub.add_parser("review", parents=[common])
    rv.add_argument("--mode", choices=["wrong", "full", "mock"], default="wrong")
    rv.add_argument("--ratio", action="append", default=[], help="chapter=ratio, repeatable")
    rv.add_argument("--clear", action="store_true", help="Clear the wrong-answer bank instead")
    sub.add_parser("reset", parents=[common])
    ua = sub.add_parser("unlock-all", parents=[common])
    ua.add_argument("--dev", action="store_true", help="Enable developer tools for this command")

    args = p.parse_args(argv)
    if args.version:
        print(f"roadquiz {__version__}")
        return 0
    if not args.cmd:
        p.print_help()
        return 2

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s: %(message)s")
    if args.explain:
        from .explain import enable as explain_enable
        explain_enable(True)
    seed_if_needed()
    t = TableTranslator()

    game = _build_game(args, dev=getattr(args, "dev", False))

    if args.cmd == "stages":
        df = progress_frame(game.store, game.layout)
        if args.chapter is not None:
            df = df[df["chapter"] == args.chapter]
        print(df.to_string(index=False))
        return 0

    if args.cmd == "progress":
        print(format_progress(game.store, game.layout))
        return 0

    if args.cmd == "reset":
        game.reset_progress()
        print("Progress reset.")
        return 0

    if args.cmd == "unlock-all":
        try:
            game.unlock_all_stages()
        except DevToolsDisabledError as e:
            print(f"ERROR: {e} (pass --dev or set dev_tools: true)", file=sys.stderr)
            return 2
        print("All stages unlocked.")
        return 0

    bank = game.load_questions(args.questions)
    if bank.is_empty:
        print(t("empty_bank"), file=sys.stderr)
        return 1

    if args.cmd == "bank":
        print(bank.chapter_counts().to_string(index=False))
        return 0

    if args.cmd == "review" and args.clear:
        game.clear_wrong_questions()
        print("Wrong-answer bank cleared.")
        return 0

    try:
        if args.cmd == "play":
            stage = args.stage or game.store.highest_unlocked_stage
            print(game.layout.label(stage))
            engine = game.start_run(stage=stage)
        elif args.cmd == "review":
            ratios = _parse_ratios(args.ratio)
            if args.mode == "wrong":
                questions = game.select_wrong_question_review(ratios)
            elif args.mode == "full":
                questions = game.select_full_review(ratios)
            else:
                questions = game.select_mock_exam()
            engine = game.start_run(questions=questions, mode=args.mode)
        else:
            return 0
    except EmptyRunError:
        print(t("no_questions"), file=sys.stderr)
        return 1
    except (InvalidTransitionError, OutOfRangeError, argparse.ArgumentTypeError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    try:
        play_run(engine, game, t=t)
    except (KeyboardInterrupt, EOFError):
        print("\nRun abandoned.")
        return 130
    _report(game, engine, t)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
