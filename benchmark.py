# benchmark.py
import argparse
import os
import time
from typing import Dict, List, Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd
from pathos.multiprocessing import ProcessingPool as Pool

from backtracking import BacktrackingScheduler, SearchBudgetExceeded
from config import INPUT_DIR, OUTPUT_DIR, setup_logging
from conflict_detector import detect_conflicts
from data_models import Group, Instructor, Room, Subject
from timetable import TimeTable


def scale_catalog(timetable: TimeTable, factor: int) -> TimeTable:
    """Replicate every record `factor` times; copy k gets ids suffixed with -k."""
    scaled = TimeTable()
    for k in range(factor):
        scaled.rooms.extend(Room(f"{r.id}-{k}", f"{r.name} #{k}", r.capacity, r.room_type)
                            for r in timetable.rooms)
        scaled.instructors.extend(Instructor(f"{i.id}-{k}", f"{i.name} #{k}", i.specialty, i.unavailable)
                                  for i in timetable.instructors)
        scaled.groups.extend(Group(f"{g.id}-{k}", f"{g.name} #{k}", g.size) for g in timetable.groups)
        scaled.subjects.extend(Subject(f"{s.id}-{k}", f"{s.name} #{k}", f"{s.instructor_id}-{k}",
                                       f"{s.group_id}-{k}", s.duration, s.required_room_type,
                                       s.sessions_per_week)
                               for s in timetable.subjects)
    return scaled


def run_case(factor: int, data_dir: str = INPUT_DIR, time_limit: Optional[float] = None) -> Dict:
    timetable = scale_catalog(TimeTable().load_data_from_files(data_dir), factor)
    scheduler = BacktrackingScheduler(timetable, time_limit_seconds=time_limit)

    start_time = time.time()
    try:
        solution = scheduler.run()
        status = "solved" if solution or timetable.total_sessions_required() == 0 else "unsatisfiable"
    except SearchBudgetExceeded:
        solution = []
        status = "inconclusive"
    execution_time = time.time() - start_time

    clashes = detect_conflicts(solution, timetable.subjects, timetable.rooms,
                               timetable.instructors, timetable.groups)
    return {
        "factor": factor,
        "subjects": len(timetable.subjects),
        "tasks": timetable.total_sessions_required(),
        "sessions": len(solution),
        "conflicts": len(clashes),
        "steps": scheduler.steps,
        "backtracks": scheduler.backtracks,
        "execution_time": execution_time,
        "status": status,
    }


def run_benchmark(factors: List[int],
                  processes: int = 4,
                  data_dir: str = INPUT_DIR,
                  time_limit: Optional[float] = None) -> pd.DataFrame:
    data_dirs = [data_dir] * len(factors)
    limits = [time_limit] * len(factors)
    if processes > 1:
        pool = Pool(nodes=min(processes, len(factors)))
        try:
            records = pool.map(run_case, factors, data_dirs, limits)
        finally:
            pool.close()
            pool.join()
            pool.clear()
    else:
        records = list(map(run_case, factors, data_dirs, limits))

    results = pd.DataFrame(records).sort_values("factor").reset_index(drop=True)
    for _, row in results.iterrows():
        print(f"x{row['factor']}: {row['status']}, {row['sessions']}/{row['tasks']} sessions, "
              f"Steps: {row['steps']}, Backtracks: {row['backtracks']}, "
              f"Execution Time: {row['execution_time']:.3f}s, Conflicts: {row['conflicts']}")
    return results


def plot_results(results: pd.DataFrame, output_dir: str = OUTPUT_DIR) -> str:
    os.makedirs(output_dir, exist_ok=True)
    fig, (ax_time, ax_steps) = plt.subplots(1, 2, figsize=(12, 5))

    ax_time.plot(results["tasks"], results["execution_time"], marker='o')
    ax_time.set_xlabel("Tasks")
    ax_time.set_ylabel("Execution time (s)")
    ax_time.set_title("Solve time vs. catalog size")
    ax_time.grid(True)

    ax_steps.plot(results["tasks"], results["steps"], marker='o', label="legality checks")
    ax_steps.plot(results["tasks"], results["backtracks"], marker='x', label="backtracks")
    ax_steps.set_xlabel("Tasks")
    ax_steps.set_title("Search effort vs. catalog size")
    ax_steps.legend()
    ax_steps.grid(True)

    path = os.path.join(output_dir, "benchmark.png")
    fig.savefig(path)
    plt.close(fig)
    return path


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Time the backtracking scheduler on replicated catalogs")
    parser.add_argument("--factors", type=int, nargs="+", default=[1, 2, 4, 8])
    parser.add_argument("--processes", type=int, default=4)
    parser.add_argument("--time-limit", type=float, default=None)
    parser.add_argument("--data-dir", default=INPUT_DIR)
    parser.add_argument("--output-dir", default=OUTPUT_DIR)
    return parser.parse_args()


def main():
    setup_logging("WARNING")
    args = parse_args()
    results = run_benchmark(args.factors, processes=args.processes,
                            data_dir=args.data_dir, time_limit=args.time_limit)
    os.makedirs(args.output_dir, exist_ok=True)
    csv_path = os.path.join(args.output_dir, "benchmark.csv")
    results.to_csv(csv_path, index=False)
    plot_path = plot_results(results, args.output_dir)
    print(f"Wrote {csv_path} and {plot_path}")


if __name__ == '__main__':
    main()
