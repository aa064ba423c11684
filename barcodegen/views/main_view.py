"""Main Tkinter view for the barcode generator desktop application."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional
import tkinter as tk
from tkinter import filedialog, messagebox as tk_messagebox

import ttkbootstrap as tb
from ttkbootstrap.constants import (
    BOTH,
    DANGER,
    INFO,
    LEFT,
    LIGHT,
    PRIMARY,
    RIGHT,
    SECONDARY,
    SUCCESS,
    W,
    X,
    Y,
    YES,
)
from PIL import ImageTk

from barcodegen.controllers.main_controller import MainController
from barcodegen.dtos.barcode_entry import BarcodeEntry
from barcodegen.dtos.session_snapshot import SessionSnapshot
from barcodegen.services.barcode_renderer import (
    PREVIEW_OPTIONS,
    BarcodeRenderer,
    BarcodeRenderError,
    RenderOptions,
)
from barcodegen.services.barcode_session_service import PrintMode

STATUS_TIMEOUT_MS = 3000
SHEET_COLUMNS = 4
SLOT_PREVIEW_OPTIONS = RenderOptions(module_width=0.2, module_height=8.0, show_text=False, dpi=96)


class Messagebox:
    """Thin wrapper around the Tk dialogs used for confirmations and errors."""

    @staticmethod
    def showerror(title: str, message: str) -> None:
        """Display an error dialog."""

        tk_messagebox.showerror(title=title, message=message)

    @staticmethod
    def askyesno(title: str, message: str) -> bool:
        """Request a yes/no confirmation dialog and return the chosen option."""

        return bool(tk_messagebox.askyesno(title=title, message=message))


def _format_timestamp(entry: BarcodeEntry) -> str:
    """Return the creation date in the local time zone."""

    return entry.createdAt.astimezone().strftime("%Y-%m-%d %H:%M")


class BarcodeMainView:
    """Build the generator tab, the A4 sheet tab and the history sidebar."""

    def __init__(self, app: tb.Window, controller: MainController) -> None:
        self.app = app
        self.controller = controller.barcodes
        self.renderer = BarcodeRenderer(PREVIEW_OPTIONS)

        self.label_var = tk.StringVar()
        self.status_var = tk.StringVar()
        self.sheet_title_var = tk.StringVar()
        self._status_job: Optional[str] = None
        self._images: Dict[str, ImageTk.PhotoImage] = {}
        self._history_ids: List[str] = []

        self._build_layout()
        self.refresh()

    # ------------------------------------------------------------------
    # Construcción
    # ------------------------------------------------------------------
    def _build_layout(self) -> None:
        container = tb.Frame(self.app)
        container.pack(fill=BOTH, expand=YES)

        sidebar = tb.Frame(container, padding=(12, 12), width=300)
        sidebar.pack(side=LEFT, fill=Y)
        sidebar.pack_propagate(False)
        self._build_history(sidebar)

        content = tb.Frame(container, padding=(16, 12))
        content.pack(side=LEFT, fill=BOTH, expand=YES)

        tb.Label(content, textvariable=self.status_var, bootstyle=INFO).pack(anchor=W, pady=(0, 6))

        self.notebook = tb.Notebook(content)
        self.notebook.pack(fill=BOTH, expand=YES)
        self.generator_tab = tb.Frame(self.notebook, padding=16)
        self.sheet_tab = tb.Frame(self.notebook, padding=16)
        self.notebook.add(self.generator_tab, text="Individual")
        self.notebook.add(self.sheet_tab, text="Hoja A4")
        self._build_generator(self.generator_tab)
        self._build_sheet(self.sheet_tab)

    def _build_history(self, parent: tb.Frame) -> None:
        tb.Label(parent, text="Historial", font=("Segoe UI", 14, "bold")).pack(anchor=W, pady=(0, 8))

        self.history_list = tk.Listbox(parent, activestyle="none", exportselection=False, font=("Segoe UI", 10))
        self.history_list.pack(fill=BOTH, expand=YES)
        self.history_list.bind("<<ListboxSelect>>", self._on_history_select)

        buttons = tb.Frame(parent)
        buttons.pack(fill=X, pady=(8, 0))
        tb.Button(buttons, text="Agregar a hoja", bootstyle=PRIMARY, command=self._on_history_enqueue).pack(
            side=LEFT, fill=X, expand=YES, padx=(0, 4)
        )
        tb.Button(buttons, text="Eliminar", bootstyle=DANGER, command=self._on_history_delete).pack(
            side=LEFT, fill=X, expand=YES
        )
        tb.Button(
            parent,
            text="Borrar historial",
            bootstyle="danger-outline",
            command=self._on_clear_history,
        ).pack(fill=X, pady=(4, 0))

    def _build_generator(self, parent: tb.Frame) -> None:
        tb.Label(parent, text="Nueva etiqueta", font=("Segoe UI", 12, "bold")).pack(anchor=W)
        row = tb.Frame(parent)
        row.pack(fill=X, pady=(4, 12))
        entry = tb.Entry(row, textvariable=self.label_var)
        entry.pack(side=LEFT, fill=X, expand=YES)
        entry.bind("<Return>", lambda _event: self._on_generate())
        tb.Button(row, text="Generar", bootstyle=SUCCESS, command=self._on_generate).pack(side=LEFT, padx=(8, 0))

        self.current_title = tb.Label(parent, font=("Segoe UI", 14, "bold"))
        self.current_title.pack(anchor=W)
        self.current_id = tb.Label(parent, bootstyle=SECONDARY)
        self.current_id.pack(anchor=W, pady=(0, 8))
        self.preview = tb.Label(parent, bootstyle=LIGHT)
        self.preview.pack(pady=8)

        actions = tb.Frame(parent)
        actions.pack(fill=X, pady=(8, 0))
        tb.Button(actions, text="Copiar ID", bootstyle=SECONDARY, command=self._on_copy).pack(side=LEFT, padx=(0, 6))
        tb.Button(actions, text="Descargar PNG", bootstyle=SECONDARY, command=self._on_download).pack(
            side=LEFT, padx=(0, 6)
        )
        tb.Button(actions, text="Agregar a hoja", bootstyle=PRIMARY, command=self._on_enqueue_current).pack(
            side=LEFT, padx=(0, 6)
        )
        tb.Button(
            actions,
            text="Imprimir",
            bootstyle=INFO,
            command=lambda: self._on_print(PrintMode.SINGLE),
        ).pack(side=RIGHT)

    def _build_sheet(self, parent: tb.Frame) -> None:
        header = tb.Frame(parent)
        header.pack(fill=X, pady=(0, 8))
        tb.Label(header, textvariable=self.sheet_title_var, font=("Segoe UI", 12, "bold")).pack(side=LEFT)
        tb.Button(
            header,
            text="Imprimir hoja",
            bootstyle=INFO,
            command=lambda: self._on_print(PrintMode.SHEET),
        ).pack(side=RIGHT)
        tb.Button(header, text="Vaciar hoja", bootstyle=DANGER, command=self._on_clear_sheet).pack(
            side=RIGHT, padx=(0, 6)
        )

        self.sheet_grid = tb.Frame(parent)
        self.sheet_grid.pack(fill=BOTH, expand=YES)
        for column in range(SHEET_COLUMNS):
            self.sheet_grid.grid_columnconfigure(column, weight=1)

    # ------------------------------------------------------------------
    # Renderizado
    # ------------------------------------------------------------------
    def refresh(self) -> None:
        """Redraw every widget from the controller snapshot."""

        snapshot = self.controller.get_snapshot()
        self._render_history(snapshot)
        self._render_current(snapshot)
        self._render_sheet(snapshot)

    def _photo(self, key: str, value: str, options: RenderOptions) -> Optional[ImageTk.PhotoImage]:
        try:
            image = self.renderer.render_image(value, options)
        except BarcodeRenderError:
            return None
        photo = ImageTk.PhotoImage(image)
        self._images[key] = photo
        return photo

    def _render_history(self, snapshot: SessionSnapshot) -> None:
        self.history_list.delete(0, tk.END)
        self._history_ids = [entry.id for entry in snapshot.history]
        if not snapshot.history:
            self.history_list.insert(tk.END, "Sin códigos guardados")
            return
        for index, entry in enumerate(snapshot.history):
            self.history_list.insert(tk.END, f"{entry.displayName}  ·  {entry.id}  ·  {_format_timestamp(entry)}")
            if snapshot.currentEntry is not None and entry.id == snapshot.currentEntry.id:
                self.history_list.selection_set(index)

    def _render_current(self, snapshot: SessionSnapshot) -> None:
        current = snapshot.currentEntry
        if current is None:
            self.current_title.configure(text="Sin código seleccionado")
            self.current_id.configure(text="Genera un código para comenzar.")
            self.preview.configure(image="")
            return
        self.current_title.configure(text=current.displayName)
        self.current_id.configure(text=f"{current.id}  ·  {current.format}")
        photo = self._photo("current", current.id, PREVIEW_OPTIONS)
        self.preview.configure(image=photo or "")

    def _render_sheet(self, snapshot: SessionSnapshot) -> None:
        self.sheet_title_var.set(f"Hoja A4 ({len(snapshot.printQueue)}/{snapshot.sheetCapacity})")
        for child in self.sheet_grid.winfo_children():
            child.destroy()
        for key in [key for key in self._images if key.startswith("slot-")]:
            del self._images[key]

        for index, slot in enumerate(snapshot.sheet_slots()):
            cell = tb.Frame(self.sheet_grid, padding=6, bootstyle=LIGHT)
            cell.grid(row=index // SHEET_COLUMNS, column=index % SHEET_COLUMNS, padx=4, pady=4, sticky="nsew")
            if slot is None:
                tb.Label(cell, text=f"Espacio {index + 1}", bootstyle=SECONDARY).pack(expand=YES)
                continue
            tb.Label(cell, text=slot.displayName, font=("Segoe UI", 9, "bold")).pack(anchor=W)
            photo = self._photo(f"slot-{slot.printId}", slot.id, SLOT_PREVIEW_OPTIONS)
            tb.Label(cell, image=photo or "", text=slot.id, compound="top").pack()
            tb.Button(
                cell,
                text="Quitar",
                bootstyle="danger-link",
                command=self._bind_action(self.controller.remove_from_sheet, slot.printId),
            ).pack(anchor="e")

    def _bind_action(self, action: Callable[[str], None], value: str) -> Callable[[], None]:
        def _run() -> None:
            action(value)
            self.refresh()

        return _run

    # ------------------------------------------------------------------
    # Eventos
    # ------------------------------------------------------------------
    def show_status(self, message: str) -> None:
        """Show a transient message below the title."""

        self.status_var.set(message)
        if self._status_job is not None:
            self.app.after_cancel(self._status_job)
        self._status_job = self.app.after(STATUS_TIMEOUT_MS, lambda: self.status_var.set(""))

    def _selected_history_id(self) -> Optional[str]:
        selection = self.history_list.curselection()
        if not selection or selection[0] >= len(self._history_ids):
            return None
        return self._history_ids[selection[0]]

    def _on_history_select(self, _event: tk.Event) -> None:
        entry_id = self._selected_history_id()
        if entry_id is None:
            return
        self.controller.select_barcode(entry_id)
        self.notebook.select(self.generator_tab)
        self._render_current(self.controller.get_snapshot())

    def _on_generate(self) -> None:
        entry, error = self.controller.generate_barcode(self.label_var.get())
        if error:
            Messagebox.showerror("Error", error)
            return
        self.label_var.set("")
        self.refresh()
        self.show_status(f"Generado {entry.id}")

    def _on_copy(self) -> None:
        current = self.controller.get_snapshot().currentEntry
        if current is None:
            return
        self.app.clipboard_clear()
        self.app.clipboard_append(current.id)
        self.show_status("ID copiado.")

    def _on_download(self) -> None:
        path, error = self.controller.export_current_png()
        if error:
            Messagebox.showerror("Descargar", error)
            return
        self.show_status(f"Imagen guardada en {path}")

    def _on_enqueue_current(self) -> None:
        _slot, error = self.controller.add_current_to_sheet()
        self._after_enqueue(error)

    def _on_history_enqueue(self) -> None:
        entry_id = self._selected_history_id()
        if entry_id is None:
            return
        _slot, error = self.controller.add_to_sheet(entry_id)
        self._after_enqueue(error)

    def _after_enqueue(self, error: Optional[str]) -> None:
        if error:
            self.show_status(error)
            return
        self.refresh()
        self.show_status("Agregado a la hoja A4.")

    def _on_history_delete(self) -> None:
        entry_id = self._selected_history_id()
        if entry_id is None:
            return
        if not Messagebox.askyesno(
            "Eliminar",
            "¿Eliminar definitivamente este código del historial y de la hoja de impresión?",
        ):
            return
        self.controller.delete_barcode(entry_id)
        self.refresh()
        self.show_status("Código eliminado.")

    def _on_clear_history(self) -> None:
        if not Messagebox.askyesno(
            "Borrar historial",
            "¿Eliminar todos los códigos del historial? La hoja de impresión también se vaciará.",
        ):
            return
        self.controller.clear_history()
        self.refresh()
        self.show_status("Historial borrado.")

    def _on_clear_sheet(self) -> None:
        if not Messagebox.askyesno("Vaciar hoja", "¿Quitar todos los códigos de la hoja de impresión?"):
            return
        self.controller.clear_sheet()
        self.refresh()
        self.show_status("Hoja vaciada.")

    def _on_print(self, mode: PrintMode) -> None:
        error = self.controller.validate_print(mode)
        if error:
            self.show_status(error)
            return
        default_dir = self.controller.getExportDirectory()
        default_dir.mkdir(parents=True, exist_ok=True)
        target = filedialog.asksaveasfilename(
            parent=self.app,
            title="Guardar documento para imprimir",
            defaultextension=".docx",
            initialdir=str(default_dir),
            filetypes=[("Documento Word", "*.docx")],
        )
        if not target:
            return
        path, error = self.controller.export_print_document(mode, Path(target))
        if error:
            Messagebox.showerror("Imprimir", error)
            return
        self.show_status(f"Documento listo para imprimir: {path}")


def run_gui(controller: Optional[MainController] = None) -> None:
    """Render and start the Tkinter interface for the barcode generator."""

    controller = controller or MainController()
    app = tb.Window(themename=controller.configuration.get_theme_name())
    app.title("BarcodeGen - Generador de códigos")
    app.geometry("1280x760")
    BarcodeMainView(app, controller)
    app.mainloop()
