"""
Session controller: the voice session state machine.

IDLE -> WAKE_LISTENING -> COMMAND_LISTENING -> PROCESSING
     -> (AWAITING_CONFIRMATION) -> WAKE_LISTENING

The controller is the only component that starts or stops a recognizer, and
at most one recognizer is active at a time. All delays (wake pause, settle
delay, restart backoff) are scheduler callbacks; recognizer and synthesizer
progress arrives as events through handle_event().
"""
from typing import Dict, Optional

from nullistant.actions.executor import ActionExecutor, ActionOutcome
from nullistant.commands.definitions import SESSION_ACTIONS, CommandDefinition
from nullistant.commands.table import CommandMatch, CommandTable
from nullistant.context.shared_context import SharedContext
from nullistant.core.config import Config
from nullistant.core.errors import (
    ActionExecutionError,
    CapabilityUnavailable,
    NoIntentMatch,
    NoTargetFound,
    PermissionDenied,
    recognition_error_from_code,
)
from nullistant.core.events import (
    COMMAND,
    WAKE,
    Event,
    RecognizerEnded,
    RecognizerError,
    RecognizerResult,
    RecognizerStarted,
    SynthesisEnded,
    SynthesisError,
    SynthesisStarted,
)
from nullistant.core.logger import get_logger
from nullistant.core.scheduler import Scheduler
from nullistant.core.state import PendingAction, RuntimeState, SessionState
from nullistant.intent.classifier import IntentClassifier
from nullistant.policy.confirmation import resolve_pending
from nullistant.resolver.target_resolver import TargetResolver
from nullistant.stt.recognizer import Recognizer
from nullistant.surface.models import TargetableEntity
from nullistant.surface.scanner import SurfaceScanner
from nullistant.tts.feedback import FeedbackArbiter
from nullistant.tts.synthesizer import FeedbackPriority


UNKNOWN_COMMAND_MESSAGE = 'Sorry, I didn\'t understand "{transcript}". Say "help" for available commands.'
EXECUTION_ERROR_MESSAGE = "Sorry, there was an error executing that command"
PERMISSION_DENIED_MESSAGE = "Microphone access denied. Please allow microphone access and turn voice commands on again."

# Timer labels owned by the session
_WAKE_PAUSE = "wake pause"
_SETTLE = "settle"
_RESTART = "recognizer restart"
_RESUME = "recognizer resume"
_SESSION_TIMERS = (_WAKE_PAUSE, _SETTLE, _RESTART, _RESUME)


def confirmation_prompt(description: str) -> str:
    return f"Do you want to {description.lower()}? Say yes to confirm or no to cancel."


class SessionController:
    """Owns RuntimeState and drives recognizers, processing and feedback"""

    def __init__(
        self,
        scheduler: Scheduler,
        feedback: FeedbackArbiter,
        scanner: SurfaceScanner,
        executor: ActionExecutor,
        wake_recognizer: Optional[Recognizer] = None,
        command_recognizer: Optional[Recognizer] = None,
        context: Optional[SharedContext] = None,
        classifier: Optional[IntentClassifier] = None,
        resolver: Optional[TargetResolver] = None,
        table: Optional[CommandTable] = None,
        state: Optional[RuntimeState] = None,
        require_wake: bool = True,
        intro_text: Optional[str] = None,
    ):
        """
        Args:
            wake_recognizer: Continuous recognizer listening for the wake phrase
            command_recognizer: Single-shot recognizer capturing one command
            require_wake: False skips wake listening; the command recognizer
                is reopened after every command instead
            intro_text: Spoken once on first activation, inside the intro window
        """
        self.logger = get_logger()
        self.scheduler = scheduler
        self.feedback = feedback
        self.scanner = scanner
        self.executor = executor
        self.context = context or feedback.context
        self.classifier = classifier or IntentClassifier()
        self.resolver = resolver or TargetResolver(Config.scoring_weights())
        self.table = table if table is not None else CommandTable()
        self.state = state or RuntimeState()
        self.require_wake = require_wake
        self.intro_text = intro_text

        self.recognizers: Dict[str, Optional[Recognizer]] = {
            WAKE: wake_recognizer,
            COMMAND: command_recognizer,
        }
        self.active_role: Optional[str] = None

        self.running = False
        self.permission_denied = False
        self.restart_attempts = 0
        self._final_text = ""
        self._intro_announced = False
        self._notified_capabilities = set()

    @property
    def settings(self):
        return self.context.settings

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def activate(self) -> bool:
        """
        Start the session (IDLE -> listening).

        Also the way back after a permission denial, once access is granted.
        Returns True if a recognizer was started.
        """
        if not self.settings.enabled:
            self.logger.info("[STATE] voice commands are disabled; not activating")
            return False
        if self.running and not self.state.is_in_state(SessionState.IDLE):
            self.logger.debug("[STATE] already active")
            return True

        self.permission_denied = False
        self.restart_attempts = 0
        self.running = True

        if self.intro_text and not self._intro_announced:
            self._intro_announced = True
            self.feedback.announce_intro(self.intro_text)

        if not self._return_to_listening():
            self.running = False
            return False
        return True

    def stop(self) -> None:
        """Manual stop: silence whichever recognizer is active and go IDLE"""
        self._cancel_timers()
        self.executor.cancel_pending()
        self._stop_active()
        self.running = False
        if self.state.pending_action is not None:
            self.logger.info(f"[CONFIRM] dropped pending '{self.state.pending_action.description}'")
        self._transition(SessionState.IDLE)

    def toggle(self) -> bool:
        """Flip between listening and stopped; returns True if now running"""
        if self.running:
            self.stop()
            return False
        return self.activate()

    def shutdown(self) -> None:
        self.stop()
        self.feedback.stop()
        self.logger.info("[STATE] session shut down")

    # ------------------------------------------------------------------
    # Configuration surface
    # ------------------------------------------------------------------

    def register_command(self, command: CommandDefinition) -> None:
        self.table.register(command)

    def remove_command(self, pattern: str) -> bool:
        return self.table.remove(pattern)

    def apply_settings(self, **changes) -> Dict:
        """Apply setting changes; toggling `enabled` starts or stops the session"""
        changed = self.context.apply_settings(**changes)
        if not changed:
            return changed
        self.logger.info(f"[STATE] settings changed: {changed}")

        for role, recognizer in self.recognizers.items():
            if recognizer is not None:
                self._configure_recognizer(role, recognizer)

        if "enabled" in changed:
            if changed["enabled"]:
                self.activate()
                self._speak("Voice commands enabled", FeedbackPriority.HIGH)
            else:
                self.stop()
                self._speak("Voice commands disabled", FeedbackPriority.HIGH)
        return changed

    # ------------------------------------------------------------------
    # Recognizer control
    # ------------------------------------------------------------------

    def _start_recognizer(self, role: str) -> bool:
        recognizer = self.recognizers.get(role)
        if recognizer is None:
            self._capability_unavailable(CapabilityUnavailable("speech recognition", f"no {role} recognizer"))
            return False

        self._stop_active()
        if role == COMMAND:
            self._final_text = ""
        self._configure_recognizer(role, recognizer)
        self.active_role = role
        try:
            recognizer.start()
        except CapabilityUnavailable as e:
            self.active_role = None
            self._capability_unavailable(e)
            return False
        self.logger.debug(f"[STT] {role} recognizer started")
        return True

    def _configure_recognizer(self, role: str, recognizer: Recognizer) -> None:
        settings = self.settings
        recognizer.language = settings.language
        recognizer.interim_results = settings.interim_results
        recognizer.max_alternatives = settings.max_alternatives
        # The command recognizer always captures a single utterance
        if role == WAKE:
            recognizer.continuous = settings.continuous

    def _stop_active(self) -> None:
        role = self.active_role
        if role is None:
            return
        # Cleared first so the recognizer's own end event is ignored
        self.active_role = None
        recognizer = self.recognizers.get(role)
        if recognizer is not None:
            recognizer.stop()
            self.logger.debug(f"[STT] {role} recognizer stopped")

    def _cancel_timers(self) -> None:
        for label in _SESSION_TIMERS:
            self.scheduler.cancel_label(label)

    def _capability_unavailable(self, error: CapabilityUnavailable) -> None:
        """Disable the feature and tell the user, once per capability"""
        self._cancel_timers()
        self.running = False
        self._transition(SessionState.IDLE)
        if error.capability in self._notified_capabilities:
            return
        self._notified_capabilities.add(error.capability)
        self.logger.warning(f"[STATE] {error}; voice commands disabled")
        self._speak(
            f"{error.capability.capitalize()} is not available. Please use the on-screen controls.",
            FeedbackPriority.HIGH,
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _transition(self, new_state: SessionState) -> None:
        previous = self.state.transition_to(new_state)
        if previous != new_state:
            self.logger.info(f"[STATE] {previous.value} -> {new_state.value}")

    def _return_to_listening(self) -> bool:
        if self.require_wake:
            self._transition(SessionState.WAKE_LISTENING)
            return self._start_recognizer(WAKE)
        return self._begin_command_listening()

    def _begin_command_listening(self) -> bool:
        self._transition(SessionState.COMMAND_LISTENING)
        return self._start_recognizer(COMMAND)

    def _on_wake(self) -> None:
        self.logger.info("[WAKE] wake phrase detected")
        self._stop_active()
        self.scheduler.call_later(Config.WAKE_PAUSE_MS, self._after_wake_pause, label=_WAKE_PAUSE)

    def _after_wake_pause(self) -> None:
        if self.running and self.state.is_in_state(SessionState.WAKE_LISTENING):
            self._begin_command_listening()

    def _schedule_settle(self) -> None:
        self.scheduler.cancel_label(_SETTLE)
        self.scheduler.call_later(Config.SETTLE_DELAY_MS, self._after_settle, label=_SETTLE)

    def _after_settle(self) -> None:
        if self.state.is_in_state(SessionState.AWAITING_CONFIRMATION):
            # Listen for the yes/no without requiring the wake phrase
            if self.running:
                self._start_recognizer(COMMAND)
            return
        if not self.state.is_in_state(SessionState.PROCESSING):
            return
        if self.running:
            self._return_to_listening()
        else:
            self._transition(SessionState.IDLE)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def handle_event(self, event: Event) -> None:
        if isinstance(event, (SynthesisStarted, SynthesisEnded, SynthesisError)):
            self.feedback.handle_event(event)
            return

        role = getattr(event, "recognizer", None)
        if role is None:
            self.logger.debug(f"Unhandled event: {event}")
            return
        if role != self.active_role:
            self.logger.debug(f"[STT] ignoring {type(event).__name__} from inactive {role} recognizer")
            return

        if isinstance(event, RecognizerStarted):
            self.logger.debug(f"[STT] {role} recognizer listening")
        elif isinstance(event, RecognizerResult):
            self._on_result(event)
        elif isinstance(event, RecognizerEnded):
            self._on_ended(event)
        elif isinstance(event, RecognizerError):
            self._on_error(event)

    def _on_result(self, event: RecognizerResult) -> None:
        if event.confidence < self.settings.min_confidence:
            self.logger.debug(
                f"[STT] low confidence {event.confidence:.2f}, ignored: '{event.transcript}'"
            )
            return
        self.restart_attempts = 0

        if event.recognizer == WAKE:
            if self._contains_wake_phrase(event.transcript):
                self._on_wake()
            return

        text = event.transcript.strip()
        if event.is_final:
            self._final_text = f"{self._final_text} {text}".strip()
            self.state.live_transcript = self._final_text
        else:
            self.state.live_transcript = f"{self._final_text} {text}".strip()
            self.logger.debug(f"Interim: {self.state.live_transcript}")

    def _contains_wake_phrase(self, transcript: str) -> bool:
        text = transcript.lower()
        return any(phrase.lower() in text for phrase in self.settings.wake_phrases)

    def _on_ended(self, event: RecognizerEnded) -> None:
        self.active_role = None

        if event.recognizer == WAKE:
            if self.running and self.state.is_in_state(SessionState.WAKE_LISTENING):
                # Continuous recognizer stopped on its own; keep it alive
                self.scheduler.call_later(
                    Config.RECOGNIZER_RESUME_MS, lambda: self._restart(WAKE), label=_RESUME
                )
            return

        text = self._final_text.strip()
        self._final_text = ""

        if self.state.is_in_state(SessionState.AWAITING_CONFIRMATION):
            if not text:
                self._start_recognizer(COMMAND)
                return
            self._handle_confirmation_reply(text)
            return

        if not self.state.is_in_state(SessionState.COMMAND_LISTENING):
            return
        if text:
            self.process_command(text)
        else:
            self.logger.debug("[STT] empty command")
            self._return_to_listening()

    def _on_error(self, event: RecognizerError) -> None:
        self.active_role = None
        error = recognition_error_from_code(event.code, event.recognizer)

        if isinstance(error, PermissionDenied):
            self.logger.error(f"[STT] {error}; stopping until voice commands are turned on again")
            self.permission_denied = True
            self.stop()
            self._speak(PERMISSION_DENIED_MESSAGE, FeedbackPriority.HIGH)
            return

        self.restart_attempts += 1
        delay = Config.restart_backoff_ms(self.restart_attempts)
        self.logger.warning(f"[STT] {error}; restarting in {delay}ms (attempt {self.restart_attempts})")
        self.scheduler.call_later(delay, lambda: self._restart(event.recognizer), label=_RESTART)

    def _restart(self, role: str) -> None:
        if not self.running or self.permission_denied or self.active_role is not None:
            return
        if role == WAKE and self.state.is_in_state(SessionState.WAKE_LISTENING):
            self._start_recognizer(WAKE)
        elif role == COMMAND and self.state.current_state in (
            SessionState.COMMAND_LISTENING,
            SessionState.AWAITING_CONFIRMATION,
        ):
            self._start_recognizer(COMMAND)

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def process_command(self, text: str) -> None:
        """
        Process one finalized command transcript.

        While a confirmation is pending the text is treated as the yes/no reply.
        The session returns to listening after the settle delay whatever the
        outcome.
        """
        text = (text or "").strip()
        if not text:
            return
        if self.state.is_in_state(SessionState.AWAITING_CONFIRMATION):
            self._handle_confirmation_reply(text)
            return

        self.scheduler.cancel_label(_WAKE_PAUSE)
        self._stop_active()
        self._transition(SessionState.PROCESSING)
        self.state.record_command(text)
        self.logger.info(f"[INTENT] processing '{text}' (mode={self.settings.processing_mode})")

        try:
            self._dispatch(text)
        except NoIntentMatch as e:
            self.logger.info(f"[INTENT] unknown voice command: '{e.transcript}'")
            self._speak(UNKNOWN_COMMAND_MESSAGE.format(transcript=e.transcript), FeedbackPriority.HIGH)
        except NoTargetFound as e:
            self.logger.info(f"[RESOLVE] {e.reasoning}")
            self._speak(f"Sorry, I couldn't find that. {e.reasoning}", FeedbackPriority.HIGH)
        except ActionExecutionError as e:
            self.logger.error(f"[ACTION] {e}")
            self._speak(EXECUTION_ERROR_MESSAGE, FeedbackPriority.HIGH)

        self._schedule_settle()

    def _dispatch(self, text: str) -> None:
        mode = self.settings.processing_mode
        exact = self.table.match(text, allow_partial=False)

        # help / repeat / stop speech work in every mode
        if exact is not None and exact.command.action in SESSION_ACTIONS:
            self._run_session_action(exact)
            return

        if mode == "commands":
            match = self.table.match(text)
            if match is None:
                raise NoIntentMatch(text)
            self._run_command(match, text)
            return

        if mode == "hybrid" and exact is not None:
            self._run_command(exact, text)
            return

        self._resolve_target(text)

    def _run_session_action(self, match: CommandMatch) -> None:
        action = match.command.action
        if action == "help":
            self._speak(self.table.help_text(), FeedbackPriority.HIGH)
        elif action == "repeat_last":
            last = self.state.last_command
            if not last:
                self._speak("There is no previous command to repeat", FeedbackPriority.HIGH)
                return
            self.logger.info(f"[INTENT] repeating '{last}'")
            self._dispatch(last)
        elif action == "stop_speech":
            self.feedback.stop()
        elif action in ("confirm", "cancel"):
            self._speak("There is nothing to confirm", FeedbackPriority.HIGH)

    def _run_command(self, match: CommandMatch, text: str) -> None:
        command = match.command
        if command.action in SESSION_ACTIONS:
            self._run_session_action(match)
            return

        self.state.last_command = text
        if command.requires_confirmation and self.settings.confirmation_required:
            prompt = confirmation_prompt(command.description)
            self.state.await_confirmation(PendingAction(
                run=lambda: self._execute(match),
                description=command.description,
                prompt=prompt,
            ))
            self.logger.info(f"[STATE] -> AWAITING_CONFIRMATION ({command.description})")
            self._speak(prompt, FeedbackPriority.HIGH)
            return

        outcome = self._execute(match)
        self._speak(outcome.message or f"{command.description} executed", FeedbackPriority.HIGH)

    def _execute(self, match: CommandMatch) -> ActionOutcome:
        """Run a command-table effect; raises ActionExecutionError on failure"""
        outcome = self.executor.run_direct(match.command.action, match.call_args())
        if not outcome.success:
            raise outcome.error or ActionExecutionError(match.command.action)
        self.logger.info(f"[ACTION] executed: {match.command.description}")
        return outcome

    def _resolve_target(self, text: str) -> None:
        analysis = self.classifier.classify(text)
        entities = self.scanner.scan()
        viewport = self.scanner.viewport()
        result = self.resolver.resolve(text.lower(), analysis, entities, viewport.height)
        if not result.success:
            raise NoTargetFound(text, result.reasoning)

        self.state.last_command = text
        self.logger.info(f"[RESOLVE] {result.action} ({result.confidence}%): {result.reasoning}")
        self.executor.activate_target(
            result.entity,
            on_complete=lambda outcome, entity=result.entity: self._on_activation_complete(outcome, entity),
        )

    def _on_activation_complete(self, outcome: ActionOutcome, entity: TargetableEntity) -> None:
        if outcome.success:
            self._speak(f"Clicked {entity.describe()}", FeedbackPriority.LOW)
        elif outcome.error is not None:
            self._speak(EXECUTION_ERROR_MESSAGE, FeedbackPriority.HIGH)

    def _handle_confirmation_reply(self, text: str) -> None:
        self.state.record_command(text)
        result = resolve_pending(text, self.state, speak_fn=lambda t: self._speak(t, FeedbackPriority.HIGH))
        if result == "ignored":
            # Re-prompted; keep waiting for yes or no
            if self.running and self.active_role is None and not self.scheduler.pending(_SETTLE):
                self._start_recognizer(COMMAND)
            return
        if result == "none":
            return
        self.scheduler.cancel_label(_SETTLE)
        if self.running:
            self._return_to_listening()
        else:
            self._transition(SessionState.IDLE)

    def _speak(self, text: str, priority: FeedbackPriority = FeedbackPriority.LOW) -> None:
        self.feedback.speak(text, priority=priority)
