import logging
from enum import Enum
from pathlib import Path

import yaml
from transitions import Machine


class SessionPhase(str, Enum):
    IDLE = "idle"
    COUNTING = "counting"
    CAPTURING = "capturing"
    COOLDOWN = "cooldown"
    COMPLETE = "complete"


class SessionFSM:
    """
    Finite State Machine for one photo strip session.
    Loads its structure from states.yaml for easy modification.
    """

    def __init__(self, config_path=None, callbacks=None):
        """
        :param config_path: Optional path to the YAML FSM definition.
        :param callbacks: Optional dict of callbacks for state entry actions.
                          Example: {"on_enter_capturing": some_function}
        """
        self.log = logging.getLogger("SessionFSM")
        self.config_path = config_path or Path(__file__).parent / "states.yaml"
        self.callbacks = callbacks or {}

        with open(self.config_path, "r") as f:
            fsm_config = yaml.safe_load(f)

        states = fsm_config.get("states", [])
        transitions = fsm_config.get("transitions", [])
        initial = fsm_config.get("initial", "idle")

        unknown = {s for s in states if s not in {p.value for p in SessionPhase}}
        if unknown:
            raise ValueError(f"States {sorted(unknown)} in {self.config_path} have no SessionPhase")

        self.machine = Machine(
            model=self,
            states=states,
            transitions=transitions,
            initial=initial,
            auto_transitions=False,
            after_state_change="debug_state",
        )

        # Register and validate callbacks
        for name, func in self.callbacks.items():
            if not callable(func):
                raise ValueError(f"Callback '{name}' must be callable, got {type(func)}")
            if not name.startswith(("on_enter_", "on_exit_")):
                raise ValueError(f"Callback name '{name}' should start with 'on_enter_' or 'on_exit_'")
            state = name.split("_", 2)[2]
            if state not in states:
                raise ValueError(f"Callback '{name}' refers to unknown state '{state}'")
            # Machine.on_enter_<state>(func) appends func to the state's callbacks
            getattr(self.machine, name)(func)

    @property
    def phase(self) -> SessionPhase:
        return SessionPhase(self.state)

    def debug_state(self):
        self.log.debug(f"Session phase is now {self.state}")
