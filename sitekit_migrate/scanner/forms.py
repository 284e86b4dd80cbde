"""Form detector: native <form> markup, Formik and react-hook-form."""

from __future__ import annotations

import logging
import re

from sitekit_migrate.models import (
    ACTION_FOR_COMPLEXITY,
    Category,
    Complexity,
    FieldOption,
    FormDetection,
    FormField,
    FormLibrary,
    MatchStrategy,
)
from sitekit_migrate.scanner.base import BaseDetector, SourceFile
from sitekit_migrate.scanner.parser import (
    attribute_literal,
    element_text,
    enclosing_component_name,
    iter_jsx_elements,
    jsx_attributes,
    line_range,
    tag_name,
)

logger = logging.getLogger(__name__)

FIELD_TAGS = ("input", "textarea", "select")
FORMIK_FIELD_TAGS = ("Field", "FastField")
MULTI_STEP_MARKERS = ("useFieldArray", "FieldArray", "steps", "currentStep")

MODERATE_FIELD_COUNT = 5
COMPLEX_FIELD_COUNT = 10

_REGISTER_RE = re.compile(r"""register\(\s*['"](\w+)['"]""")
_FETCH_URL_RE = re.compile(r"""fetch\(\s*['"]([^'"]+)['"]""")
_AXIOS_URL_RE = re.compile(r"""axios\.(?:post|put)\(\s*['"]([^'"]+)['"]""")


def classify_complexity(field_count: int, content: str) -> Complexity:
    if field_count > COMPLEX_FIELD_COUNT or any(m in content for m in MULTI_STEP_MARKERS):
        return Complexity.COMPLEX
    if field_count > MODERATE_FIELD_COUNT:
        return Complexity.MODERATE
    return Complexity.SIMPLE


def detect_form_library(content: str) -> FormLibrary:
    if "react-hook-form" in content or "useForm" in content:
        return FormLibrary.REACT_HOOK_FORM
    if "formik" in content or "Formik" in content:
        return FormLibrary.FORMIK
    if "<form" in content and "onSubmit" in content:
        return FormLibrary.NATIVE
    return FormLibrary.UNKNOWN


def extract_submit_url(content: str) -> str | None:
    m = _FETCH_URL_RE.search(content)
    if m:
        return m.group(1)
    m = _AXIOS_URL_RE.search(content)
    if m:
        return m.group(1)
    return None


def extract_fields(form_element) -> list[FormField]:
    """Collect fields from the inputs nested under a form element.

    Radio inputs sharing a name become one field with an options list.
    Checkboxes sharing a name do the same only when more than one carries a
    value; a lone checkbox stays a boolean field.
    """
    fields: list[FormField] = []
    radio_groups: dict[str, dict] = {}
    checkbox_groups: dict[str, dict] = {}

    for element in iter_jsx_elements(form_element):
        tag = tag_name(element)
        if tag not in FIELD_TAGS:
            continue

        attrs = jsx_attributes(element)
        name = attribute_literal(attrs.get("name")) or ""
        if not name:
            continue
        field_type = attribute_literal(attrs.get("type")) or "text"
        placeholder = attribute_literal(attrs.get("placeholder")) or None
        required = "required" in attrs
        value = attribute_literal(attrs.get("value")) or ""

        if field_type == "radio":
            group = radio_groups.setdefault(name, {"required": False, "options": []})
            group["required"] = group["required"] or required
            if value:
                group["options"].append(FieldOption(label=value, value=value))
            continue

        if field_type == "checkbox" and value:
            group = checkbox_groups.setdefault(name, {"required": False, "options": []})
            group["required"] = group["required"] or required
            group["options"].append(FieldOption(label=value, value=value))
            continue

        if tag == "select":
            options = _select_options(element)
            fields.append(FormField(
                name=name,
                type="select",
                required=required,
                placeholder=placeholder,
                options=tuple(options) if options else None,
            ))
            continue

        fields.append(FormField(
            name=name,
            type="textarea" if tag == "textarea" else field_type,
            required=required,
            placeholder=placeholder,
        ))

    for name, group in radio_groups.items():
        fields.append(FormField(
            name=name, type="radio", required=group["required"],
            options=tuple(group["options"]),
        ))

    for name, group in checkbox_groups.items():
        options = group["options"]
        fields.append(FormField(
            name=name, type="checkbox", required=group["required"],
            options=tuple(options) if len(options) > 1 else None,
        ))

    return fields


def _select_options(select_element) -> list[FieldOption]:
    options: list[FieldOption] = []
    for element in iter_jsx_elements(select_element):
        if tag_name(element) != "option":
            continue
        value = attribute_literal(jsx_attributes(element).get("value")) or ""
        label = element_text(element)
        if value or label:
            options.append(FieldOption(
                label=label or value,
                value=value or re.sub(r"\s+", "_", label.lower()),
            ))
    return options


def _formik_fields(form_element) -> list[FormField]:
    fields: list[FormField] = []
    for element in iter_jsx_elements(form_element):
        if tag_name(element) not in FORMIK_FIELD_TAGS:
            continue
        attrs = jsx_attributes(element)
        name = attribute_literal(attrs.get("name"))
        if not name:
            continue
        field_type = (
            attribute_literal(attrs.get("type"))
            or attribute_literal(attrs.get("as"))
            or "text"
        )
        fields.append(FormField(name=name, type=field_type, required="required" in attrs))
    return fields


class FormDetector(BaseDetector):
    category = Category.FORM
    needs_tree = True

    def detect(self, source: SourceFile) -> list[FormDetection]:
        content = source.text
        forms: list[FormDetection] = []
        uses_formik = "Formik" in content or "formik" in content

        for element in iter_jsx_elements(source.root_node):
            tag = tag_name(element)
            if tag == "form":
                detection = self._native_form(element, source)
                if detection is not None:
                    forms.append(detection)
            elif tag == "Form" and uses_formik:
                fields = _formik_fields(element)
                if fields:
                    forms.append(self._library_form(
                        source, fields, FormLibrary.FORMIK,
                        enclosing_component_name(element) or "FormikForm",
                        *line_range(element),
                    ))

        if not forms and "useForm" in content and "react-hook-form" in content:
            rhf = self._react_hook_form(source)
            if rhf is not None:
                forms.append(rhf)

        return forms

    def _native_form(self, element, source: SourceFile) -> FormDetection | None:
        if "onSubmit" not in jsx_attributes(element):
            return None
        fields = extract_fields(element)
        if not fields:
            return None

        content = source.text
        complexity = classify_complexity(len(fields), content)
        start, end = line_range(element)
        return FormDetection(
            file_path=source.rel_path,
            start_line=start,
            end_line=end,
            component_name=enclosing_component_name(element) or "UnknownForm",
            fields=tuple(fields),
            form_library=detect_form_library(content),
            complexity=complexity,
            suggested_action=ACTION_FOR_COMPLEXITY[complexity],
            has_validation="required" in content or "validate" in content,
            submits_to=extract_submit_url(content),
        )

    def _library_form(
        self,
        source: SourceFile,
        fields: list[FormField],
        library: FormLibrary,
        component_name: str,
        start_line: int = 0,
        end_line: int = 0,
        strategy: MatchStrategy = MatchStrategy.TREE,
    ) -> FormDetection:
        # Library-managed forms always need a human in the loop
        complexity = classify_complexity(len(fields), source.text)
        if complexity is Complexity.SIMPLE:
            complexity = Complexity.MODERATE
        return FormDetection(
            file_path=source.rel_path,
            start_line=start_line,
            end_line=end_line,
            strategy=strategy,
            component_name=component_name,
            fields=tuple(fields),
            form_library=library,
            complexity=complexity,
            suggested_action=ACTION_FOR_COMPLEXITY[complexity],
            has_validation=True if library is FormLibrary.FORMIK else (
                "errors" in source.text or "formState" in source.text
            ),
            submits_to=extract_submit_url(source.text),
        )

    def _react_hook_form(self, source: SourceFile) -> FormDetection | None:
        seen: set[str] = set()
        fields: list[FormField] = []
        for m in _REGISTER_RE.finditer(source.text):
            name = m.group(1)
            if name not in seen:
                seen.add(name)
                fields.append(FormField(name=name))
        if not fields:
            return None
        logger.debug("%s: react-hook-form fields %s", source.rel_path, sorted(seen))
        return self._library_form(
            source, fields, FormLibrary.REACT_HOOK_FORM, "ReactHookForm",
            strategy=MatchStrategy.TEXT,
        )
