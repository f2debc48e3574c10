"""Screen-by-screen application flow as a pure state machine.

Screens form a tagged union of frozen dataclasses and :func:`transition`
maps ``(screen, event)`` to the next screen without side effects. Running the
idea service while on :class:`Loading` is the caller's job; it feeds the
outcome back as :class:`GenerationSucceeded` or :class:`GenerationFailed`.

::

    hero -> profile-generate -> loading -> results
         -> profile-validate -> validator -> loading -> results
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from .errors import InvalidTransition
from .ideas import IdeaBatch, IdeaMode
from .schemas import Idea, Profile, ScreenView


# ---------------------------------------------------------------------------
# Screens
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Hero:
    name: str = field(default="hero", init=False)


@dataclass(frozen=True)
class ProfileForm:
    mode: IdeaMode

    @property
    def name(self) -> str:
        return f"profile-{self.mode.value}"


@dataclass(frozen=True)
class Validator:
    profile: Profile
    name: str = field(default="validator", init=False)


@dataclass(frozen=True)
class Results:
    mode: IdeaMode
    profile: Profile
    ideas: Tuple[Idea, ...]
    batch_id: str
    user_idea: str = ""
    name: str = field(default="results", init=False)


@dataclass(frozen=True)
class Loading:
    mode: IdeaMode
    profile: Profile
    return_to: Union[ProfileForm, Validator, Results]
    user_idea: str = ""
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    name: str = field(default="loading", init=False)


Screen = Union[Hero, ProfileForm, Validator, Loading, Results]


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChooseGenerate:
    pass


@dataclass(frozen=True)
class ChooseValidate:
    pass


@dataclass(frozen=True)
class SubmitProfile:
    profile: Profile


@dataclass(frozen=True)
class SubmitIdea:
    user_idea: str


@dataclass(frozen=True)
class Regenerate:
    pass


@dataclass(frozen=True)
class Back:
    pass


@dataclass(frozen=True)
class GenerationSucceeded:
    batch: IdeaBatch
    request_id: str


@dataclass(frozen=True)
class GenerationFailed:
    error: Exception
    request_id: str


Event = Union[
    ChooseGenerate,
    ChooseValidate,
    SubmitProfile,
    SubmitIdea,
    Regenerate,
    Back,
    GenerationSucceeded,
    GenerationFailed,
]

USER_EVENT_TYPES = {
    "choose_generate": ChooseGenerate,
    "choose_validate": ChooseValidate,
    "submit_profile": SubmitProfile,
    "submit_idea": SubmitIdea,
    "regenerate": Regenerate,
    "back": Back,
}


def _back(screen: Screen) -> Screen:
    if isinstance(screen, ProfileForm):
        return Hero()
    if isinstance(screen, Validator):
        return ProfileForm(IdeaMode.VALIDATE)
    if isinstance(screen, Results):
        if screen.mode is IdeaMode.GENERATE:
            return ProfileForm(IdeaMode.GENERATE)
        return Validator(screen.profile)
    if isinstance(screen, Loading):
        # The in-flight call is not cancelled; its outcome is discarded.
        return Hero()
    raise InvalidTransition("There is nothing to go back to.")


def _reject(screen: Screen, event: Event) -> InvalidTransition:
    return InvalidTransition(f"Cannot {type(event).__name__} from the {screen.name} screen.")


def transition(screen: Screen, event: Event) -> Screen:
    """Return the screen that follows *screen* after *event*."""

    if isinstance(event, (GenerationSucceeded, GenerationFailed)):
        # Only the Loading screen that issued the call may consume its outcome.
        if not isinstance(screen, Loading) or screen.request_id != event.request_id:
            return screen
        if isinstance(event, GenerationFailed):
            return screen.return_to
        return Results(
            mode=screen.mode,
            profile=screen.profile,
            ideas=tuple(event.batch.ideas),
            batch_id=event.batch.batch_id,
            user_idea=screen.user_idea,
        )

    if isinstance(event, Back):
        return _back(screen)

    if isinstance(screen, Hero):
        if isinstance(event, ChooseGenerate):
            return ProfileForm(IdeaMode.GENERATE)
        if isinstance(event, ChooseValidate):
            return ProfileForm(IdeaMode.VALIDATE)

    elif isinstance(screen, ProfileForm) and isinstance(event, SubmitProfile):
        if screen.mode is IdeaMode.GENERATE:
            return Loading(mode=IdeaMode.GENERATE, profile=event.profile, return_to=screen)
        return Validator(event.profile)

    elif isinstance(screen, Validator) and isinstance(event, SubmitIdea):
        if not event.user_idea.strip():
            raise InvalidTransition("Please describe the idea you want to validate.")
        return Loading(
            mode=IdeaMode.VALIDATE,
            profile=screen.profile,
            return_to=screen,
            user_idea=event.user_idea,
        )

    elif isinstance(screen, Results):
        if isinstance(event, Regenerate):
            return Loading(
                mode=screen.mode,
                profile=screen.profile,
                return_to=screen,
                user_idea=screen.user_idea,
            )
        if isinstance(event, SubmitIdea) and screen.mode is IdeaMode.VALIDATE:
            if not event.user_idea.strip():
                raise InvalidTransition("Please describe the idea you want to validate.")
            return Loading(
                mode=IdeaMode.VALIDATE,
                profile=screen.profile,
                return_to=screen,
                user_idea=event.user_idea,
            )

    raise _reject(screen, event)


def parse_user_event(
    event_type: str,
    profile: Optional[Profile] = None,
    user_idea: Optional[str] = None,
) -> Event:
    """Build a user event from its wire form."""

    event_cls = USER_EVENT_TYPES.get(event_type)
    if event_cls is None:
        raise InvalidTransition(f"Unknown event: {event_type}")
    if event_cls is SubmitProfile:
        if profile is None:
            raise InvalidTransition("submit_profile requires a profile.")
        return SubmitProfile(profile)
    if event_cls is SubmitIdea:
        return SubmitIdea(user_idea or "")
    return event_cls()


def describe(screen: Screen) -> ScreenView:
    """Render *screen* for the API."""

    if isinstance(screen, ProfileForm):
        return ScreenView(screen=screen.name, mode=screen.mode.value)
    if isinstance(screen, Validator):
        return ScreenView(screen=screen.name, mode=IdeaMode.VALIDATE.value, profile=screen.profile)
    if isinstance(screen, Loading):
        return ScreenView(
            screen=screen.name,
            mode=screen.mode.value,
            profile=screen.profile,
            user_idea=screen.user_idea or None,
        )
    if isinstance(screen, Results):
        return ScreenView(
            screen=screen.name,
            mode=screen.mode.value,
            profile=screen.profile,
            user_idea=screen.user_idea or None,
            ideas=list(screen.ideas),
            batch_id=screen.batch_id,
        )
    return ScreenView(screen=screen.name)
