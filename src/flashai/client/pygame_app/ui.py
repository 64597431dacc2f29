from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import pygame  # type: ignore[import-not-found]


Color = tuple[int, int, int]

INK: Color = (30, 41, 59)
MUTED: Color = (100, 116, 139)
ACCENT: Color = (79, 70, 229)
DANGER: Color = (220, 38, 38)
PAPER: Color = (248, 250, 252)


@dataclass
class Fonts:
    ui: pygame.font.Font
    small: pygame.font.Font
    big: pygame.font.Font


def load_fonts() -> Fonts:
    pygame.font.init()
    return Fonts(
        ui=pygame.font.SysFont(None, 26),
        small=pygame.font.SysFont(None, 20),
        big=pygame.font.SysFont(None, 40),
    )


def draw_text(
    screen: pygame.Surface,
    font: pygame.font.Font,
    text: str,
    pos: tuple[int, int],
    color: Color = INK,
) -> None:
    img = font.render(text, True, color)
    screen.blit(img, pos)


def wrap_text(font: pygame.font.Font, text: str, width: int) -> list[str]:
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}".strip()
        if font.size(candidate)[0] <= width or not current:
            current = candidate
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines


def draw_centered_lines(
    screen: pygame.Surface,
    font: pygame.font.Font,
    text: str,
    rect: pygame.Rect,
    color: Color = INK,
) -> None:
    lines = wrap_text(font, text, rect.width - 16)
    line_h = font.get_linesize()
    y = rect.centery - (line_h * len(lines)) // 2
    for line in lines:
        img = font.render(line, True, color)
        screen.blit(img, img.get_rect(midtop=(rect.centerx, y)).topleft)
        y += line_h


@dataclass
class Button:
    rect: pygame.Rect
    text: str
    on_click: Callable[[], None]
    enabled: bool = True
    primary: bool = False

    def handle_event(self, event: pygame.event.Event) -> bool:
        if not self.enabled:
            return False
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.rect.collidepoint(event.pos):
                self.on_click()
                return True
        return False

    def draw(self, screen: pygame.Surface, font: pygame.font.Font) -> None:
        if not self.enabled:
            bg, fg = (226, 232, 240), (148, 163, 184)
        elif self.primary:
            bg, fg = ACCENT, (255, 255, 255)
        else:
            bg, fg = (255, 255, 255), INK
        pygame.draw.rect(screen, bg, self.rect, border_radius=10)
        pygame.draw.rect(screen, (203, 213, 225), self.rect, width=2, border_radius=10)
        img = font.render(self.text, True, fg)
        r = img.get_rect(center=self.rect.center)
        screen.blit(img, r.topleft)


@dataclass
class Toggle:
    rect: pygame.Rect
    label: str
    value: bool
    on_change: Callable[[bool], None]

    def handle_event(self, event: pygame.event.Event) -> bool:
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.rect.collidepoint(event.pos):
                self.value = not self.value
                self.on_change(self.value)
                return True
        return False

    def draw(self, screen: pygame.Surface, font: pygame.font.Font) -> None:
        box = pygame.Rect(self.rect.x + 6, self.rect.centery - 11, 22, 22)
        pygame.draw.rect(screen, (255, 255, 255), box, border_radius=4)
        pygame.draw.rect(screen, ACCENT if self.value else MUTED, box, width=2, border_radius=4)
        if self.value:
            pygame.draw.line(screen, ACCENT, (box.x + 4, box.y + 12), (box.x + 10, box.y + 18), 3)
            pygame.draw.line(screen, ACCENT, (box.x + 10, box.y + 18), (box.x + 18, box.y + 6), 3)
        txt = font.render(self.label, True, INK)
        screen.blit(txt, (box.right + 10, self.rect.centery - txt.get_height() // 2))


@dataclass
class TextInput:
    rect: pygame.Rect
    text: str = ""
    placeholder: str = ""
    on_submit: Callable[[str], None] | None = None
    active: bool = False
    secret: bool = False
    max_len: int = 80

    def handle_event(self, event: pygame.event.Event) -> bool:
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self.active = self.rect.collidepoint(event.pos)
            return self.active
        if not self.active:
            return False
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_RETURN:
                if self.on_submit is not None:
                    self.on_submit(self.text)
                self.active = False
                return True
            if event.key == pygame.K_ESCAPE:
                self.active = False
                return True
            if event.key == pygame.K_BACKSPACE:
                self.text = self.text[:-1]
                return True
            if event.unicode and len(self.text) < self.max_len and event.unicode.isprintable():
                self.text += event.unicode
                return True
        return False

    def draw(self, screen: pygame.Surface, font: pygame.font.Font) -> None:
        pygame.draw.rect(screen, (255, 255, 255), self.rect, border_radius=8)
        pygame.draw.rect(screen, ACCENT if self.active else (203, 213, 225), self.rect, width=2, border_radius=8)
        if self.text:
            shown = "*" * len(self.text) if self.secret else self.text
            img = font.render(shown, True, INK)
        else:
            img = font.render(self.placeholder, True, (148, 163, 184))
        # keep the caret end visible for long input
        clip = screen.get_clip()
        screen.set_clip(self.rect.inflate(-12, -4))
        x = self.rect.x + 8
        if img.get_width() > self.rect.width - 16:
            x = self.rect.right - 8 - img.get_width()
        screen.blit(img, (x, self.rect.centery - img.get_height() // 2))
        screen.set_clip(clip)


def focus_next(inputs: list[TextInput]) -> None:
    """Move keyboard focus to the input after the active one."""
    for i, field in enumerate(inputs):
        if field.active:
            field.active = False
            inputs[(i + 1) % len(inputs)].active = True
            return
    if inputs:
        inputs[0].active = True
