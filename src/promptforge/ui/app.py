"""Gradio UI for PromptForge."""

import logging

import gradio as gr

from promptforge.core.config import config

from .handlers import (
    add_field,
    apply_value,
    choose_alternative,
    custom_alternatives,
    edit_prompt,
    editor_view,
    generate_prompt,
    improve_prompt,
    load_model_catalog,
    load_settings_view,
    move_field,
    new_conversation,
    refresh_alternatives,
    remove_field,
    restore_version,
    save_settings,
    select_field,
    send_chat_message,
    show_conversation,
    switch_persona,
    toggle_custom_model,
    translate_prompt,
    use_proposal,
)
from .models import MODEL_CHOICES, PERSONA_CHOICES, UIState
from .state import initialize_ui_state

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_ui() -> tuple[gr.Blocks, str]:
    """Create the Gradio UI.

    Returns:
        Tuple of (Gradio Blocks app, custom CSS string)
    """
    custom_css = """
    .prompt-view {
        min-height: 160px;
        border: 1px solid #374151;
        border-radius: 6px;
        padding: 12px;
    }
    """

    app = gr.Blocks(title="PromptForge")

    with app:
        # Session state - one instance per user
        ui_state = gr.State(UIState())

        gr.Markdown(
            """
            # PromptForge
            ### Structured prompts for AI image generators
            """
        )

        with gr.Tabs():
            with gr.Tab("Generator", id="generator_tab"):
                editor = create_generator_tab(ui_state)

            with gr.Tab("Chat", id="chat_tab"):
                chat = create_chat_tab(ui_state, editor)

            with gr.Tab("Settings", id="settings_tab"):
                settings = create_settings_tab(ui_state)

        # Initialize state, settings form and views on load
        app.load(
            fn=load_settings_view,
            inputs=[ui_state],
            outputs=[
                settings["api_key"],
                settings["model_choice"],
                settings["custom_model"],
                settings["status"],
                ui_state,
            ],
        ).then(
            fn=lambda state: editor_view(initialize_ui_state(state)),
            inputs=[ui_state],
            outputs=editor["outputs"],
        ).then(
            fn=show_conversation,
            inputs=[ui_state],
            outputs=[chat["chatbot"], chat["use_prompt_btn"], ui_state],
        )

    return app, custom_css


def create_generator_tab(ui_state: gr.State) -> dict:
    """Create the prompt generator tab.

    Args:
        ui_state: UI state component

    Returns:
        Dictionary of components shared with the other tabs
    """
    with gr.Row():
        with gr.Column(scale=1):
            idea = gr.Textbox(
                label="Your idea",
                placeholder="A lighthouse on a cliff at dusk...",
                lines=3,
            )
            idea_image = gr.Image(
                label="Inspiration image (optional)",
                type="filepath",
                sources=["upload"],
                height=200,
            )
            generate_btn = gr.Button("Generate", variant="primary", size="lg")

            with gr.Accordion("Versions", open=False):
                history_dropdown = gr.Dropdown(label="Saved versions", choices=[], value=None)
                restore_btn = gr.Button("Restore", size="sm")

        with gr.Column(scale=2):
            prompt_view = gr.Markdown(elem_classes="prompt-view")
            status = gr.Markdown()

            with gr.Group():
                with gr.Row():
                    field_dropdown = gr.Dropdown(label="Field", choices=[], value=None, scale=3)
                    up_btn = gr.Button("⬆️ Up", size="sm", scale=1)
                    down_btn = gr.Button("⬇️ Down", size="sm", scale=1)
                    remove_btn = gr.Button("🗑️ Remove", size="sm", variant="stop", scale=1)
                field_value = gr.Textbox(label="Value", lines=2)
                apply_btn = gr.Button("Apply value", size="sm")
                alternatives = gr.Radio(label="Alternatives (click to use)", choices=[])
                with gr.Row():
                    refresh_btn = gr.Button("🔄 New alternatives", size="sm")
                    custom_query = gr.Textbox(
                        show_label=False,
                        placeholder="Ask for specific alternatives (e.g. warmer colours)",
                        scale=3,
                    )
                    custom_btn = gr.Button("Ask", size="sm")

            with gr.Row():
                improve_btn = gr.Button("✨ Improve the whole prompt")
                translate_btn = gr.Button("📋 Copy as English")
            with gr.Row():
                edit_instruction = gr.Textbox(
                    show_label=False,
                    placeholder="Describe a change to the whole prompt",
                    scale=3,
                )
                edit_btn = gr.Button("Apply change", scale=1)
            with gr.Row():
                new_field_name = gr.Textbox(
                    show_label=False,
                    placeholder="Name of a field to add (e.g. camera angle)",
                    scale=3,
                )
                add_field_btn = gr.Button("➕ Add field", scale=1)

            english_prompt = gr.Textbox(
                label="English prompt",
                interactive=False,
                lines=4,
                buttons=["copy"],
            )
            with gr.Accordion("JSON", open=False):
                prompt_json = gr.Code(language="json", interactive=False)

    outputs = [
        prompt_view,
        field_dropdown,
        field_value,
        alternatives,
        history_dropdown,
        prompt_json,
        status,
        ui_state,
    ]

    generate_btn.click(
        fn=generate_prompt,
        inputs=[idea, idea_image, ui_state],
        outputs=outputs,
    )

    field_dropdown.input(
        fn=select_field,
        inputs=[field_dropdown, ui_state],
        outputs=[field_value, alternatives, ui_state],
    )

    apply_btn.click(
        fn=apply_value,
        inputs=[field_dropdown, field_value, ui_state],
        outputs=outputs,
    )

    alternatives.input(
        fn=choose_alternative,
        inputs=[field_dropdown, alternatives, ui_state],
        outputs=outputs,
    )

    refresh_btn.click(
        fn=refresh_alternatives,
        inputs=[field_dropdown, ui_state],
        outputs=outputs,
    )

    custom_btn.click(
        fn=custom_alternatives,
        inputs=[field_dropdown, custom_query, ui_state],
        outputs=outputs,
    )

    up_btn.click(
        fn=lambda key, state: move_field(key, -1, state),
        inputs=[field_dropdown, ui_state],
        outputs=outputs,
    )

    down_btn.click(
        fn=lambda key, state: move_field(key, 1, state),
        inputs=[field_dropdown, ui_state],
        outputs=outputs,
    )

    remove_btn.click(
        fn=remove_field,
        inputs=[field_dropdown, ui_state],
        outputs=outputs,
    )

    improve_btn.click(
        fn=improve_prompt,
        inputs=[ui_state],
        outputs=outputs,
    )

    edit_btn.click(
        fn=edit_prompt,
        inputs=[edit_instruction, ui_state],
        outputs=[edit_instruction, *outputs],
    )

    add_field_btn.click(
        fn=add_field,
        inputs=[new_field_name, ui_state],
        outputs=[new_field_name, *outputs],
    )

    restore_btn.click(
        fn=restore_version,
        inputs=[history_dropdown, ui_state],
        outputs=outputs,
    )

    translate_btn.click(
        fn=translate_prompt,
        inputs=[ui_state],
        outputs=[english_prompt, status, ui_state],
    )

    return {"outputs": outputs}


def create_chat_tab(ui_state: gr.State, editor: dict) -> dict:
    """Create the chat tab.

    Args:
        ui_state: UI state component
        editor: Components returned by :func:`create_generator_tab`

    Returns:
        Dictionary of components needed on load
    """
    persona = gr.Radio(label="Assistant", choices=PERSONA_CHOICES, value="expert")
    chatbot = gr.Chatbot(label="Conversation", height=480)
    use_prompt_btn = gr.Button("Use this prompt", variant="primary", visible=False)

    with gr.Row():
        message = gr.Textbox(
            show_label=False,
            placeholder="Ask for a change, or anything else...",
            scale=4,
        )
        chat_image = gr.Image(
            label="Image",
            type="filepath",
            sources=["upload"],
            height=100,
            scale=1,
        )
    with gr.Row():
        send_btn = gr.Button("Send", variant="primary")
        new_chat_btn = gr.Button("New conversation")
    chat_status = gr.Markdown()

    chat_outputs = [chatbot, use_prompt_btn, ui_state]

    persona.change(
        fn=switch_persona,
        inputs=[persona, ui_state],
        outputs=chat_outputs,
    )

    new_chat_btn.click(
        fn=new_conversation,
        inputs=[ui_state],
        outputs=chat_outputs,
    )

    send_inputs = [message, chat_image, ui_state]
    send_outputs = [chatbot, message, chat_image, use_prompt_btn, chat_status, ui_state]
    send_btn.click(fn=send_chat_message, inputs=send_inputs, outputs=send_outputs)
    message.submit(fn=send_chat_message, inputs=send_inputs, outputs=send_outputs)

    use_prompt_btn.click(
        fn=use_proposal,
        inputs=[ui_state],
        outputs=[chatbot, use_prompt_btn, *editor["outputs"]],
    )

    return {"chatbot": chatbot, "use_prompt_btn": use_prompt_btn}


def create_settings_tab(ui_state: gr.State) -> dict:
    """Create the API settings tab.

    Args:
        ui_state: UI state component

    Returns:
        Dictionary of the form components
    """
    gr.Markdown(
        "PromptForge uses [OpenRouter](https://openrouter.ai/keys). "
        f"Your key is stored locally in `{config.settings_file}`."
    )
    api_key = gr.Textbox(label="OpenRouter API key", type="password", placeholder="sk-or-...")
    model_choice = gr.Radio(label="Model", choices=MODEL_CHOICES, value="premium")

    with gr.Row():
        custom_model = gr.Dropdown(
            label="Custom model",
            choices=[],
            value=None,
            allow_custom_value=True,
            visible=False,
            scale=4,
        )
        catalog_btn = gr.Button("Load model list", size="sm", scale=1)

    save_btn = gr.Button("Save", variant="primary")
    status = gr.Markdown()

    model_choice.change(
        fn=toggle_custom_model,
        inputs=[model_choice],
        outputs=[custom_model],
    )

    catalog_btn.click(
        fn=load_model_catalog,
        inputs=[ui_state],
        outputs=[custom_model, status, ui_state],
    )

    save_btn.click(
        fn=save_settings,
        inputs=[api_key, model_choice, custom_model, ui_state],
        outputs=[status, ui_state],
    )

    return {
        "api_key": api_key,
        "model_choice": model_choice,
        "custom_model": custom_model,
        "status": status,
    }


def main():
    """Main entry point for the application."""
    logger.info("Starting PromptForge...")
    logger.info(f"Configuration: {config.model_dump()}")

    # Create and launch UI
    app, custom_css = create_ui()

    logger.info(f"Launching Gradio UI on {config.gradio_server_name}:{config.gradio_server_port}")

    app.launch(
        server_name=config.gradio_server_name,
        server_port=config.gradio_server_port,
        share=config.gradio_share,
        show_error=True,
        inbrowser=False,
        css=custom_css,
    )


if __name__ == "__main__":
    main()
