"""Export of juggled room assignments as JSON, Markdown and an annealing plot."""

from typing import Any, Dict, List
import json
import logging

import matplotlib.pyplot as plt

from roomjuggler.job import RoomJugglerJob
from roomjuggler.models import Gender
from roomjuggler.problem import AssignmentState, RoomOccupancyProblem
from roomjuggler.utils import _to_json_compatible

logger = logging.getLogger(__name__)


def room_assignments(problem: RoomOccupancyProblem, state: AssignmentState) -> List[Dict[str, Any]]:
    """List every room with its guests, in room order."""
    rooms = []
    for room_id, room in enumerate(problem.rooms, start=1):
        guest_ids = sorted(state.guest_ids_of_room[room_id])
        rooms.append(
            {
                "room": room.name,
                "capacity": room.capacity,
                "gender": room.gender,
                "guests": [problem.guests[g - 1].name for g in guest_ids],
            }
        )
    return rooms


def wish_report(problem: RoomOccupancyProblem, state: AssignmentState) -> List[Dict[str, Any]]:
    return [
        {
            "mail": wish.mail,
            "guests": [problem.guests[g - 1].name for g in wish.guest_ids],
            "fulfilled": fulfilled,
        }
        for wish, fulfilled in zip(problem.wishes, state.fulfilled_wishes)
    ]


def results_dict(job: RoomJugglerJob) -> Dict[str, Any]:
    results: Dict[str, Any] = {"stats": job.stats()}
    for gender in (Gender.F, Gender.M):
        state = job.state(gender)
        if state is None:
            raise ValueError("The job has not been juggled yet")
        problem = job.problem(gender)
        results[gender.value] = {
            "guests": problem.guests,
            "rooms": room_assignments(problem, state),
            "wishes": wish_report(problem, state),
            "room_id_of_guest": state.room_id_of_guest,
            "guest_ids_of_room": state.guest_ids_of_room,
        }
    return _to_json_compatible(results)


def save_results_json(job: RoomJugglerJob, output_path: str) -> None:
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(results_dict(job), f, indent=2)


def save_results_markdown(job: RoomJugglerJob, output_path: str) -> None:
    """Save a human-readable Markdown summary of the room assignments."""
    lines: List[str] = []
    for gender in (Gender.F, Gender.M):
        problem = job.problem(gender)
        state = job.state(gender)
        if state is None:
            raise ValueError("The job has not been juggled yet")
        lines.append(f"## Gender {gender.value}")
        lines.append("")
        lines.append(f"- Happiness: {state.happiness} / {problem.max_happiness}")
        lines.append(f"- Fulfilled wishes: {state.n_fulfilled_wishes} / {problem.n_wishes}")
        lines.append("")
        for room in room_assignments(problem, state):
            lines.append(f"{room['room']} ({len(room['guests'])}/{room['capacity']}):")
            for name in room["guests"]:
                lines.append(f"  - {name}")
            lines.append("")

        unfulfilled = [w for w in wish_report(problem, state) if not w["fulfilled"]]
        if unfulfilled:
            lines.append("Unfulfilled wishes:")
            for wish in unfulfilled:
                lines.append(f"  - {wish['mail']}: {', '.join(wish['guests'])}")
            lines.append("")

    with open(output_path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines).strip() + "\n")


def annealing_figure(job: RoomJugglerJob):
    """Figure of happiness per temperature step for both genders and the shared schedule."""
    fig, ax_happiness = plt.subplots(figsize=(8, 4.5))
    colors = {Gender.F: "#d62728", Gender.M: "#1f77b4"}
    for gender, juggler in job.jugglers.items():
        ax_happiness.plot(
            list(range(len(juggler.happiness_history))),
            juggler.happiness_history,
            color=colors[gender],
            linewidth=2,
            label=f"Happiness {gender.value}",
        )
    ax_happiness.set_title("Simulated Annealing - Happiness and Temperature")
    ax_happiness.set_xlabel("Temperature step")
    ax_happiness.set_ylabel("Happiness")
    ax_happiness.grid(True, linestyle=":", alpha=0.5)

    # Both genders run the same schedule, a problem without moves stops after step 0
    temperatures = max(
        (j.temperature_history for j in job.jugglers.values()), key=len, default=[]
    )
    if temperatures:
        ax_temp = ax_happiness.twinx()
        ax_temp.plot(
            list(range(len(temperatures))),
            temperatures,
            color="#ff7f0e",
            linewidth=1.5,
            alpha=0.85,
            label="Temperature",
        )
        ax_temp.set_ylabel("Temperature (log scale)")
        ax_temp.set_yscale("log")
        lines = ax_happiness.get_lines() + ax_temp.get_lines()
    else:
        lines = ax_happiness.get_lines()

    labels = [l.get_label() for l in lines]
    ax_happiness.legend(lines, labels, loc="lower right")
    fig.tight_layout()
    return fig


def save_annealing_plot(job: RoomJugglerJob, output_path: str) -> None:
    """Plot happiness and temperature per temperature step."""
    fig = annealing_figure(job)
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
