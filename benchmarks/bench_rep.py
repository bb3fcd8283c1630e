"""
Benchmark: contiguous-run repetition vs generic repetition.

`satisfy(...).rep()` scans the run of matching tokens directly, while
`Parser(p).rep()` goes through the general repetition loop, one result per
token. Both produce the same results; this measures what the scan saves.

Usage:
    python benchmarks/bench_rep.py
"""

import timeit
from tokparsec.Char import char, letter
from tokparsec.Parsec import Parser
from tokparsec.Prim import run_parser, satisfy
from tokparsec.Combinators import sep_by
from tokparsec.Source import FunctionSourceMap


def bench(parser: Parser, inputs: dict[int, object], repeats: int = 5, **kwargs) -> dict[int, float]:
    results = {}
    for n, data in inputs.items():
        t = timeit.timeit(lambda: run_parser(parser, data, **kwargs), number=repeats)
        results[n] = t / repeats
    return results


def bench_rep_char(sizes: list[int]) -> tuple[dict[int, float], dict[int, float]]:
    """char('a').rep() on a long run of 'a'."""
    inputs = {n: "a" * n for n in sizes}
    return bench(char("a").rep(), inputs), bench(Parser(char("a")).rep(), inputs)


def bench_csv_line(sizes: list[int]) -> tuple[dict[int, float], dict[int, float]]:
    """sep_by(letter().rep(), char(',')): many short runs."""
    inputs = {n: ",".join("abcde" for _ in range(n)) for n in sizes}
    fast = sep_by(letter().rep(), char(","))
    slow = sep_by(Parser(letter()).rep(), char(","))
    return bench(fast, inputs), bench(slow, inputs)


def bench_token_list(sizes: list[int]) -> tuple[dict[int, float], dict[int, float]]:
    """Integers in a list, with a source map that counts one column per token."""
    columns = FunctionSourceMap(ends_at=lambda t, pos: pos.next_column())
    inputs = {n: list(range(n)) for n in sizes}
    int_token = satisfy(lambda t: isinstance(t, int))

    return (bench(int_token.rep(), inputs, source_map=columns),
            bench(Parser(int_token).rep(), inputs, source_map=columns))


def format_time(seconds: float) -> str:
    if seconds < 1e-3:
        return f"{seconds * 1e6:8.1f} us"
    elif seconds < 1:
        return f"{seconds * 1e3:8.2f} ms"
    else:
        return f"{seconds:8.3f}  s"


def print_results(name: str, fast: dict[int, float], slow: dict[int, float]) -> None:
    print(f"\n{'=' * 60}")
    print(f"  {name}")
    print(f"{'=' * 60}")
    print(f"  {'Size':>10}  {'Run scan':>12}  {'Generic':>12}  {'Speedup':>8}")
    print(f"  {'-'*10}  {'-'*12}  {'-'*12}  {'-'*8}")

    for size in fast:
        ratio = slow[size] / fast[size] if fast[size] > 0 else 0
        print(f"  {size:>10,}  {format_time(fast[size])}  {format_time(slow[size])}  {ratio:>7.1f}x")


def main() -> None:
    sizes = [1_000, 5_000, 10_000, 50_000]
    csv_sizes = [200, 1_000, 5_000, 10_000]

    print("tokparsec Repetition Benchmark")
    print("=" * 60)

    suites = [
        ("char('a').rep()", bench_rep_char, sizes),
        ("sep_by (CSV-like)", bench_csv_line, csv_sizes),
        ("List[int] tokens", bench_token_list, sizes),
    ]

    for name, fn, sz in suites:
        fast, slow = fn(sz)
        print_results(name, fast, slow)

    print()


if __name__ == "__main__":
    main()
