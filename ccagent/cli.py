# ccagent/cli.py
from __future__ import annotations
import argparse, csv, logging, os, os.path, sys

from .agent import AgentConfig
from .grid import ChipWorld, WorldFormatError
from .planners import RunStats, run_episode
from .types import Action
from .viz import draw_world_png


def format_stats(name: str, s: RunStats) -> str:
    return (f"{name:20s} | reached={s.reached!s:5s} | ticks={s.ticks:4d} | moves={s.moves:4d} | "
            f"noops={s.noops:3d} | replans={s.replans:3d} | chips_left={s.chips_left:2d} | "
            f"time={s.elapsed_sec*1000:7.1f} ms")


def _config(args: argparse.Namespace) -> AgentConfig:
    return AgentConfig(max_expansions=args.max_expansions, use_full_map=not args.hidden)


# -------- subcommands --------

def cmd_demo(args: argparse.Namespace) -> None:
    world = ChipWorld.load(args.env, reveal=not args.hidden)
    stats = run_episode(world, max_ticks=args.max_ticks, config=_config(args))
    base = os.path.splitext(os.path.basename(args.env))[0]
    print(format_stats(base, stats))
    if args.out:
        png = os.path.join(args.out, f"{base}.png")
        draw_world_png(world, stats.path_taken, png)
        print("wrote", png)


def cmd_bench(args: argparse.Namespace) -> None:
    envs = sorted(p for p in os.listdir(args.envdir) if p.endswith(".txt"))
    rows = []
    for fname in envs:
        world = ChipWorld.load(os.path.join(args.envdir, fname), reveal=not args.hidden)
        st = run_episode(world, max_ticks=args.max_ticks, config=_config(args))
        print(format_stats(fname, st))
        if args.out:
            draw_world_png(world, st.path_taken, os.path.join(args.out, os.path.splitext(fname)[0] + ".png"))
        rows.append({
            "env": fname,
            "reached": st.reached,
            "ticks": st.ticks,
            "moves": st.moves,
            "noops": st.noops,
            "replans": st.replans,
            "chips_left": st.chips_left,
            "time_sec": round(st.elapsed_sec, 6),
        })
    if args.csv and rows:
        with open(args.csv, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
            writer.writeheader()
            writer.writerows(rows)
        print("wrote CSV:", args.csv)


def cmd_show(args: argparse.Namespace) -> None:
    world = ChipWorld.load(args.env, reveal=not args.hidden)
    print(world.render(), end="\n\n")

    def on_tick(tick: int, action: Action, w: ChipWorld) -> None:
        print(f"tick {tick}: {action.value}  chips={w.remaining_chips()} keys={','.join(w.holdings) or '-'}")
        print(w.render(), end="\n\n")

    stats = run_episode(world, max_ticks=args.max_ticks, config=_config(args), on_tick=on_tick)
    print(format_stats(os.path.basename(args.env), stats))


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Chip-collecting planning agent (A* + goal priorities)")
    p.add_argument("--log-level", type=str, default="WARNING", help="DEBUG, INFO, WARNING, ...")
    sub = p.add_subparsers(dest="cmd", required=True)

    def common(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--max-ticks", type=int, default=1000)
        sp.add_argument("--max-expansions", type=int, default=1000)
        sp.add_argument("--hidden", action="store_true", help="withhold the full map from the agent")

    d = sub.add_parser("demo", help="run the agent on one map and save a PNG")
    d.add_argument("--env", type=str, required=True)
    d.add_argument("--out", type=str, default="runs")
    common(d)
    d.set_defaults(func=cmd_demo)

    b = sub.add_parser("bench", help="run the agent on every .txt in a folder")
    b.add_argument("--envdir", type=str, required=True)
    b.add_argument("--out", type=str, default="")
    b.add_argument("--csv", type=str, default="")
    common(b)
    b.set_defaults(func=cmd_bench)

    s = sub.add_parser("show", help="print the map after every tick")
    s.add_argument("--env", type=str, required=True)
    common(s)
    s.set_defaults(func=cmd_show)

    return p


def main(argv=None):
    ap = build_argparser()
    args = ap.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING),
                        format="%(levelname)s %(name)s: %(message)s")
    try:
        args.func(args)
    except WorldFormatError as e:
        print(f"bad map: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
