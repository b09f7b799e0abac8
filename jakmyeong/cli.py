#!/usr/bin/env python3
"""
Jakmyeong CLI
=============
Command-line interface for Korean name generation and review.

Usage:
    jakmyeong generate 김 --gender F -n 10
    jakmyeong more 김 --gender F --birth 2024-03-15 --hour 9
    jakmyeong saju 2024-03-15 --hour 9
    jakmyeong check 김 서윤 --hanja 瑞允
    jakmyeong report 김 서윤 瑞允
    jakmyeong pure 김 --gender F
    jakmyeong history --status favorite
    jakmyeong stats
"""

import argparse
import json
import logging
import sys

from jakmyeong import __version__
from jakmyeong.hangul import is_hangul
from jakmyeong.suri import STYLE_MODES
from jakmyeong.ui import RichView, use_rich

# =============================================================================
# Constants
# =============================================================================

GENDERS = ['M', 'F']
STATUSES = ['new', 'favorite', 'rejected']

# =============================================================================
# Utilities
# =============================================================================

class Output:
    """Handles CLI output with quiet mode support."""

    def __init__(self, quiet: bool = False):
        self.quiet = quiet

    def print(self, *args, **kwargs):
        if not self.quiet:
            print(*args, **kwargs)

    def error(self, msg: str):
        print(f"Error: {msg}", file=sys.stderr)

    def success(self, msg: str):
        if not self.quiet:
            print(f"OK: {msg}")

    def json(self, data):
        """JSON goes to stdout even in quiet mode."""
        print(json.dumps(data, indent=2, ensure_ascii=False))

    def table(self, headers: list, rows: list, col_widths: list = None):
        """Print a formatted table."""
        if self.quiet:
            return

        if not col_widths:
            col_widths = [max(len(str(h)), max((len(str(r[i])) for r in rows), default=0)) + 2
                         for i, h in enumerate(headers)]

        header_line = ''.join(str(h).ljust(w) for h, w in zip(headers, col_widths))
        print(header_line)
        print('-' * len(header_line))

        for row in rows:
            print(''.join(str(c).ljust(w) for c, w in zip(row, col_widths)))


def validate_hangul(text: str, length: int, label: str) -> tuple:
    """Validate a Hangul surname or given name."""
    if not text or not text.strip():
        return False, f"{label} cannot be empty"

    text = text.strip()

    if len(text) != length:
        return False, f"{label} must be {length} Hangul syllable{'s' if length > 1 else ''}"

    if not all(is_hangul(ch) for ch in text):
        return False, f"{label} must be written in Hangul"

    return True, text


def _candidate_rows(candidates) -> list:
    return [
        [c.rank, c.full_hangul, c.full_hanja, c.roman, c.score, c.suri_tier,
         f"{c.hanja1.meaning} / {c.hanja2.meaning}"]
        for c in candidates
    ]


def _print_candidates(candidates, out: Output):
    out.table(['#', 'Name', 'Hanja', 'Roman', 'Score', 'Tier', 'Meaning'],
              _candidate_rows(candidates), [5, 8, 8, 16, 7, 6, 30])


def _generation_kwargs(args) -> dict:
    return {
        'gender': args.gender,
        'style_mode': args.style,
        'birth_date': args.birth,
        'birth_hour': args.hour,
        'surname_hanja': args.surname_hanja,
    }


def _kit(args):
    from jakmyeong import Jakmyeong
    return Jakmyeong(db_path=args.db)


# =============================================================================
# Commands
# =============================================================================

def cmd_generate(args, out: Output):
    """Generate ranked Hanja names."""
    valid, result = validate_hangul(args.surname, 1, 'Surname')
    if not valid:
        out.error(result)
        return 1
    surname = result

    kit = _kit(args)
    if args.llm and not kit.config.has_llm:
        out.error("LLM re-scoring requires JAKMYEONG_LLM_ENDPOINT in .env")
        return 1

    if not args.json:
        out.print(f"Generating names for {surname} ({args.gender or 'any gender'}, {args.style})...")
    generation = kit.generate(surname, limit=args.count, use_llm=args.llm, **_generation_kwargs(args))

    if args.save:
        for candidate in generation.candidates:
            kit.save(candidate)

    if args.json:
        out.json([c.to_dict() for c in generation.candidates])
        return 0

    if not generation.candidates:
        out.print("No names survived the filters.")
        return 0

    summary = f"Combinations: {generation.total_combinations}, filtered: {len(generation.filtered_out)}"
    if use_rich(args.quiet):
        RichView().candidates(generation.candidates, title=f"{surname} · {args.gender or '-'} · {args.style}",
                              footer=summary)
    else:
        out.print()
        _print_candidates(generation.candidates, out)
        out.print(f"\n{summary}")
    if args.verbose:
        for reason, count in sorted(generation.filtered_by_reason().items(), key=lambda x: -x[1]):
            out.print(f"  {reason:<22}: {count:>6}")
    if args.save:
        out.success(f"Saved {len(generation.candidates)} names to history")

    return 0


def cmd_more(args, out: Output):
    """Next batch of names, continuing the saved session."""
    from jakmyeong.batch import BatchManager

    valid, result = validate_hangul(args.surname, 1, 'Surname')
    if not valid:
        out.error(result)
        return 1
    surname = result

    kit = _kit(args)
    key = ':'.join(str(v or '') for v in (
        surname, args.surname_hanja, args.gender, args.style, args.birth, args.hour))

    generation = kit.generate(surname, **_generation_kwargs(args))
    manager = BatchManager(generation.candidates, batch_size=args.count)

    if args.reset:
        kit.history.clear_batch_state(key)
    else:
        state = kit.history.load_batch_state(key)
        if state:
            manager.restore_state(state)

    batch = manager.get_next_batch()
    kit.history.save_batch_state(key, manager.get_state())
    for candidate in batch.names:
        kit.save(candidate)

    if args.json:
        out.json({
            'names': [c.to_dict() for c in batch.names],
            'has_more': batch.has_more,
            'total_used': batch.total_used,
            'is_exhausted': batch.is_exhausted,
        })
        return 0

    if not batch.names:
        out.print("No more names. Use --reset to start over.")
        return 0

    shown = f"Shown so far: {batch.total_used} of {len(generation.candidates)}"
    if use_rich(args.quiet):
        RichView().candidates(batch.names, footer=shown)
    else:
        _print_candidates(batch.names, out)
        out.print(f"\n{shown}")
    if not batch.has_more:
        out.print("That was the last batch.")
    return 0


def cmd_saju(args, out: Output):
    """Show the four pillars and yongsin of a birth date."""
    from jakmyeong.saju import ELEMENT_LABELS, analysis_text, analyze_elements, extract_yongsin

    kit = _kit(args)
    saju = kit.saju(args.date, args.hour)
    yongsin = extract_yongsin(saju)
    analysis = analyze_elements(saju)

    if args.json:
        out.json({
            'saju': saju.to_dict(),
            'elements': analysis.distribution,
            'yongsin': yongsin.to_dict(),
        })
        return 0

    if use_rich(args.quiet):
        RichView().saju(saju, yongsin)
        return 0

    out.print(f"Saju for {saju.birth_date.isoformat()} (source: {saju.source})")
    out.print("=" * 50)
    rows = []
    for label, pillar in (('Year', saju.year), ('Month', saju.month),
                          ('Day', saju.day), ('Hour', saju.hour)):
        if pillar is None:
            rows.append([label, '-', '-', '-'])
        else:
            rows.append([label, f"{pillar.name} ({pillar.hanja})",
                         ELEMENT_LABELS[pillar.stem_element], ELEMENT_LABELS[pillar.branch_element]])
    out.table(['Pillar', 'Ganji', 'Stem', 'Branch'], rows, [8, 14, 10, 10])

    out.print("\nElements:")
    for element, count in analysis.distribution.items():
        out.print(f"  {ELEMENT_LABELS[element]:<8}: {'#' * count}")
    out.print(f"\n{analysis_text(saju)}")
    out.print(yongsin.summary)
    return 0


def cmd_check(args, out: Output):
    """Run filters and hazard checks for one name."""
    valid, surname = validate_hangul(args.surname, 1, 'Surname')
    if not valid:
        out.error(surname)
        return 1
    valid, given = validate_hangul(args.given, 2, 'Given name')
    if not valid:
        out.error(given)
        return 1

    kit = _kit(args)
    result = kit.check(surname, given, given_hanja=args.hanja,
                       surname_hanja=args.surname_hanja, gender=args.gender)
    hazards = result['hazards']
    candidate = result['candidate']
    filtered = result['filtered']

    if args.json:
        out.json({
            'name': surname + given,
            'hanja': args.hanja,
            'is_safe': hazards.is_safe,
            'severity': hazards.severity,
            'issues': hazards.issues,
            'phonetics': result['phonetics'],
            'global_check': result['global_check'].to_dict(),
            'candidate': candidate.to_dict() if candidate else None,
            'filtered': filtered.to_dict() if filtered else None,
        })
        return 0

    out.print(f"Checking: {surname}{given}" + (f" ({args.hanja})" if args.hanja else ''))
    out.print("=" * 50)

    status = "SAFE" if hazards.is_safe else "WARNING"
    out.print(f"\nHazards: {status} (severity: {hazards.severity})")
    for issue in hazards.issues:
        out.print(f"  - [{issue['layer']}] {issue['type']}: {issue['reason']}")

    if result['phonetics']:
        out.print("\nPhonetics:")
        for reason in result['phonetics']:
            out.print(f"  - {reason}")

    global_check = result['global_check']
    out.print(f"\nRomanized: {global_check.romanized}")
    for warning in global_check.warnings:
        out.print(f"  - {warning.get('reason', warning)}")

    if filtered:
        out.print(f"\nFILTERED - {filtered.layer}: {filtered.reason}")
    elif candidate:
        out.print(f"\nScore: {candidate.score} (suri tier {candidate.suri_tier})")
        for period, info in candidate.four_geok.to_dict().items():
            out.print(f"  {period:<8}: {info['number']:>2} {info['level']}")

    return 0


def cmd_report(args, out: Output):
    """Narrative report for a chosen name."""
    from jakmyeong.saju import ELEMENT_LABELS

    valid, surname = validate_hangul(args.surname, 1, 'Surname')
    if not valid:
        out.error(surname)
        return 1
    valid, given = validate_hangul(args.given, 2, 'Given name')
    if not valid:
        out.error(given)
        return 1

    kit = _kit(args)
    report = kit.report(surname, given, args.hanja, surname_hanja=args.surname_hanja,
                        birth_date=args.birth, birth_hour=args.hour)

    if args.json:
        out.json(report.to_dict())
        return 0

    if use_rich(args.quiet):
        RichView().report(report)
        return 0

    out.print(f"{report.full_hangul} ({report.full_hanja})")
    out.print("=" * 50)

    out.print("\n수리 (Numerology):")
    for period in report.numerology:
        out.print(f"  {period.name} {period.age_range:<10} {period.number:>2} {period.level:<4} "
                  f"{period.interpretation}")

    out.print("\n음양 (Yin-Yang):")
    out.print("  " + '  '.join(f"{c.hanja}{c.strokes}{c.type}" for c in report.yin_yang.characters))
    out.print(f"  {report.yin_yang.summary}")

    out.print("\n자원오행 (Natural Elements):")
    for element, value in report.natural_element.name_elements.items():
        out.print(f"  {ELEMENT_LABELS[element]:<8}: {value:>3}")
    out.print(f"  {report.natural_element.summary}")

    out.print("\n발음오행 (Pronunciation):")
    out.print(f"  {report.pronunciation.summary}")

    out.print("\n불용한자 (Character Review):")
    for char in report.forbidden:
        out.print(f"  {char.hanja} [{char.status}] {char.reason}")
    out.print(f"  {report.forbidden_summary}")

    out.print(f"\n{report.summary}")
    return 0


def cmd_pure(args, out: Output):
    """Pure Korean (순우리말) names."""
    valid, surname = validate_hangul(args.surname, 1, 'Surname')
    if not valid:
        out.error(surname)
        return 1

    kit = _kit(args)
    names = kit.pure(surname, gender=args.gender, limit=args.count)

    if args.json:
        out.json([n.to_dict() for n in names])
        return 0

    if not names:
        out.print("No names found.")
        return 0

    if use_rich(args.quiet):
        RichView().pure_names(names, title=f"{surname} 순우리말")
        return 0

    rows = [[n.full_name, n.score, ' + '.join(w.meaning for w in n.words)] for n in names]
    out.table(['Name', 'Score', 'Meaning'], rows, [10, 7, 40])
    return 0


def cmd_history(args, out: Output):
    """List saved names."""
    kit = _kit(args)
    entries = kit.history.list(status=args.status, limit=args.limit)

    if args.json:
        out.json([e.to_dict() for e in entries])
        return 0

    if not entries:
        out.print("No names found.")
        return 0

    rows = [[e.full_hangul, e.full_hanja or '-', e.status.value,
             f"{e.score:.0f}" if e.score is not None else '-'] for e in entries]
    out.table(['Name', 'Hanja', 'Status', 'Score'], rows, [10, 10, 12, 8])
    out.print(f"\nTotal: {len(entries)}")
    return 0


def cmd_mark(args, out: Output):
    """Set the status of a saved name."""
    kit = _kit(args)
    if not kit.history.set_status(args.given, args.hanja or '', args.status):
        out.error(f"Not in history: {args.given} {args.hanja or ''}".rstrip())
        return 1
    out.success(f"{args.given} {args.hanja or ''} -> {args.status}")
    return 0


def cmd_stats(args, out: Output):
    """Show table and history statistics."""
    from jakmyeong.pure_korean import PureKoreanGenerator
    from jakmyeong.tables import known_surnames, load_hanja_table

    kit = _kit(args)
    stats = kit.history.stats()
    pure = PureKoreanGenerator().stats()

    if args.json:
        out.json({
            'hanja': len(load_hanja_table()),
            'surnames': len(known_surnames()),
            'pure_korean_words': pure['words'],
            'history': stats,
        })
        return 0

    out.print("Jakmyeong Statistics")
    out.print("=" * 50)
    out.print(f"\nName Hanja:        {len(load_hanja_table()):>5}")
    out.print(f"Surnames:          {len(known_surnames()):>5}")
    out.print(f"Pure Korean words: {pure['words']:>5}")

    out.print(f"\nSaved names: {stats['total']}")
    if stats['by_status']:
        out.print(f"\nBy Status:")
        for status, count in sorted(stats['by_status'].items()):
            out.print(f"  {status:<12}: {count:>5}")
    if stats.get('avg_score'):
        out.print(f"\nAverage Score: {stats['avg_score']:.1f}")
    if stats.get('top_score'):
        out.print(f"Top Score: {stats['top_score']:.0f}")
    out.print(f"Paging sessions: {stats['sessions']}")
    return 0


# =============================================================================
# Main
# =============================================================================

def _add_generation_args(p):
    p.add_argument('surname', help='Surname in Hangul (e.g. 김)')
    p.add_argument('--gender', '-g', choices=GENDERS, help='Gender filter')
    p.add_argument('--style', '-s', choices=STYLE_MODES, default='balanced',
                   help='Suri style (default: balanced)')
    p.add_argument('--birth', '-b', help='Birth date YYYY-MM-DD (enables yongsin bonus)')
    p.add_argument('--hour', type=int, help='Birth hour 0-23')
    p.add_argument('--surname-hanja', help='Surname Hanja when the surname has several')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='jakmyeong',
        description='Jakmyeong - Korean Baby Name Generator',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s generate 김 --gender F -n 10
  %(prog)s generate 이 --birth 2024-03-15 --hour 9 --save
  %(prog)s more 김 --gender F
  %(prog)s saju 2024-03-15 --hour 9
  %(prog)s check 김 서윤 --hanja 瑞允
  %(prog)s report 김 서윤 瑞允 --birth 2024-03-15
  %(prog)s pure 김 --gender F
  %(prog)s mark 서윤 瑞允 --status favorite
  %(prog)s history --status favorite
"""
    )

    parser.add_argument('--version', '-V', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--quiet', '-q', action='store_true', help='Suppress non-essential output')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging and filter details')
    parser.add_argument('--db', help='History database path (default: history.db_path in app.yaml)')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # --- generate ---
    p = subparsers.add_parser('generate', aliases=['gen', 'g'], help='Generate ranked names')
    _add_generation_args(p)
    p.add_argument('-n', '--count', type=int, default=10, help='Number of names (default: 10)')
    p.add_argument('--llm', action='store_true', help='Blend LLM evaluations into the ranking')
    p.add_argument('--save', action='store_true', help='Save generated names to history')

    # --- more ---
    p = subparsers.add_parser('more', aliases=['m'], help='Next batch of names')
    _add_generation_args(p)
    p.add_argument('-n', '--count', type=int, help='Batch size (default: batch.default_batch_size)')
    p.add_argument('--reset', action='store_true', help='Start the session over')

    # --- saju ---
    p = subparsers.add_parser('saju', help='Four pillars and yongsin of a birth date')
    p.add_argument('date', help='Birth date YYYY-MM-DD')
    p.add_argument('--hour', type=int, help='Birth hour 0-23')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    # --- check ---
    p = subparsers.add_parser('check', aliases=['c'], help='Filters and hazards for one name')
    p.add_argument('surname', help='Surname in Hangul')
    p.add_argument('given', help='Two-syllable given name in Hangul')
    p.add_argument('--hanja', help='Given-name Hanja (enables scoring)')
    p.add_argument('--surname-hanja', help='Surname Hanja when the surname has several')
    p.add_argument('--gender', '-g', choices=GENDERS, help='Gender for the post filters')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    # --- report ---
    p = subparsers.add_parser('report', aliases=['r'], help='Narrative report for a name')
    p.add_argument('surname', help='Surname in Hangul')
    p.add_argument('given', help='Two-syllable given name in Hangul')
    p.add_argument('hanja', help='Given-name Hanja')
    p.add_argument('--surname-hanja', help='Surname Hanja when the surname has several')
    p.add_argument('--birth', '-b', help='Birth date YYYY-MM-DD')
    p.add_argument('--hour', type=int, help='Birth hour 0-23')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    # --- pure ---
    p = subparsers.add_parser('pure', aliases=['p'], help='Pure Korean names')
    p.add_argument('surname', help='Surname in Hangul')
    p.add_argument('--gender', '-g', choices=GENDERS, help='Gender filter')
    p.add_argument('-n', '--count', type=int, default=20, help='Number of names (default: 20)')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    # --- history ---
    p = subparsers.add_parser('history', aliases=['ls'], help='List saved names')
    p.add_argument('--status', choices=STATUSES)
    p.add_argument('--limit', type=int, default=50, help='Max results (default: 50)')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    # --- mark ---
    p = subparsers.add_parser('mark', help='Set the status of a saved name')
    p.add_argument('given', help='Given name in Hangul')
    p.add_argument('hanja', nargs='?', help='Given-name Hanja (omit for pure Korean names)')
    p.add_argument('--status', choices=STATUSES, default='favorite', help='New status (default: favorite)')

    # --- stats ---
    p = subparsers.add_parser('stats', help='Show statistics')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    # Parse
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')

    # Handle aliases
    cmd_map = {
        'gen': 'generate', 'g': 'generate',
        'm': 'more',
        'c': 'check',
        'r': 'report',
        'p': 'pure',
        'ls': 'history',
    }
    command = cmd_map.get(args.command, args.command)

    # Output handler
    out = Output(quiet=args.quiet)

    # Dispatch
    commands = {
        'generate': cmd_generate,
        'more': cmd_more,
        'saju': cmd_saju,
        'check': cmd_check,
        'report': cmd_report,
        'pure': cmd_pure,
        'history': cmd_history,
        'mark': cmd_mark,
        'stats': cmd_stats,
    }

    handler = commands.get(command)
    if handler:
        try:
            return handler(args, out)
        except KeyboardInterrupt:
            out.print("\nCancelled.")
            return 130
        except Exception as e:
            out.error(str(e))
            if args.verbose:
                import traceback
                traceback.print_exc()
            return 1

    parser.print_help()
    return 0


if __name__ == '__main__':
    sys.exit(main())
