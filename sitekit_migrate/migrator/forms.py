"""Form migrator: registers the form and replaces the component with a managed one.

This is the only destructive migration. The original file is copied to a
``.backup`` sibling before the component is rewritten.
"""

from __future__ import annotations

import re

from sitekit_migrate.models import Category, FormDetection, FormField, MigrationResult
from sitekit_migrate.migrator.base import DRY_RUN, BaseMigrator
from sitekit_migrate.registry import (
    FieldOptionPayload,
    FormFieldPayload,
    FormPayload,
)
from sitekit_migrate.rewrite.components import SITE_KIT_FORMS, is_typescript

FIELD_TYPE_MAP = {
    "text": "text",
    "email": "email",
    "tel": "phone",
    "phone": "phone",
    "number": "number",
    "textarea": "textarea",
    "select": "select",
    "checkbox": "checkbox",
    "radio": "radio",
    "date": "date",
    "file": "file",
    "url": "url",
    "password": "text",
}


def form_slug(component_name: str) -> str:
    """``ContactForm`` -> ``contact``; ``NewsletterSignupForm`` -> ``newsletter-signup``."""
    slug = re.sub(r"([A-Z])", r"-\1", component_name).lower().lstrip("-")
    slug = re.sub(r"form$", "", slug)
    slug = re.sub(r"-+", "-", slug).strip("-")
    return slug or "form"


def format_name(component_name: str) -> str:
    name = re.sub(r"([A-Z])", r" \1", component_name).strip()
    return name[:1].upper() + name[1:]


def format_label(field_name: str) -> str:
    label = re.sub(r"([A-Z])", r" \1", field_name).replace("_", " ").strip()
    return label[:1].upper() + label[1:]


def map_field_type(field_type: str) -> str:
    return FIELD_TYPE_MAP.get(field_type, "text")


def guess_form_type(form: FormDetection) -> str:
    name = form.component_name.lower()
    field_names = " ".join(f.name.lower() for f in form.fields)

    if "contact" in name or "message" in field_names:
        return "contact"
    if "newsletter" in name or "subscribe" in name:
        return "newsletter"
    if "quote" in name or "estimate" in name:
        return "prospect"
    if "support" in name or "help" in name:
        return "support"
    if "feedback" in name:
        return "feedback"
    return "contact"


def _field_payload(field: FormField, order: int) -> FormFieldPayload:
    options = None
    if field.options:
        options = [FieldOptionPayload(label=o.label, value=o.value) for o in field.options]
    return FormFieldPayload(
        slug=field.name,
        label=format_label(field.name),
        field_type=map_field_type(field.type),
        placeholder=field.placeholder,
        is_required=field.required,
        sort_order=order,
        options=options,
    )


def build_form_payload(form: FormDetection, slug: str, project_id: str) -> FormPayload:
    return FormPayload(
        project_id=project_id,
        slug=slug,
        name=format_name(form.component_name),
        form_type=guess_form_type(form),
        fields=[_field_payload(f, i) for i, f in enumerate(form.fields)],
    )


def is_migrated_form(content: str, slug: str) -> bool:
    return SITE_KIT_FORMS in content and f"useForm('{slug}')" in content


def generate_form_code(form: FormDetection, slug: str, typescript: bool) -> str:
    name = form.component_name or "MigratedForm"
    params = "{ className }: { className?: string }" if typescript else "{ className }"
    return f"""'use client'

/**
 * {name}
 *
 * Migrated to @uptrademedia/site-kit
 * Managed form: {slug}
 *
 * Original file backed up to: {form.file_path}.backup
 */

import {{ useForm }} from '{SITE_KIT_FORMS}'

export function {name}({params}) {{
  const {{
    form,
    fields,
    values,
    errors,
    setFieldValue,
    submit,
    isSubmitting,
    isComplete,
  }} = useForm('{slug}')

  if (isComplete) {{
    return (
      <div className={{className}}>
        <p>{{form?.successMessage || 'Thanks for your submission!'}}</p>
      </div>
    )
  }}

  return (
    <form
      onSubmit={{(e) => {{ e.preventDefault(); submit() }}}}
      className={{className}}
    >
      {{fields.map((field) => (
        <div key={{field.slug}}>
          <label>
            {{field.label}}
            {{field.isRequired && <span>*</span>}}
          </label>

          {{field.fieldType === 'textarea' ? (
            <textarea
              name={{field.slug}}
              placeholder={{field.placeholder}}
              value={{String(values[field.slug] || '')}}
              onChange={{(e) => setFieldValue(field.slug, e.target.value)}}
              rows={{4}}
            />
          ) : field.fieldType === 'select' && field.options ? (
            <select
              name={{field.slug}}
              value={{String(values[field.slug] || '')}}
              onChange={{(e) => setFieldValue(field.slug, e.target.value)}}
            >
              <option value="">Select...</option>
              {{field.options.map((opt) => (
                <option key={{opt.value}} value={{opt.value}}>{{opt.label}}</option>
              ))}}
            </select>
          ) : (
            <input
              type={{field.fieldType}}
              name={{field.slug}}
              placeholder={{field.placeholder}}
              value={{String(values[field.slug] || '')}}
              onChange={{(e) => setFieldValue(field.slug, e.target.value)}}
            />
          )}}

          {{errors[field.slug] && <p>{{errors[field.slug]}}</p>}}
        </div>
      ))}}

      <button type="submit" disabled={{isSubmitting}}>
        {{isSubmitting ? 'Submitting...' : (form?.submitButtonText || 'Submit')}}
      </button>
    </form>
  )
}}

export default {name}
"""


class FormMigrator(BaseMigrator):
    category = Category.FORM

    async def _migrate(self, form: FormDetection) -> MigrationResult:
        slug = form_slug(form.component_name)
        content = self._read(form.file_path)
        if is_migrated_form(content, slug):
            return self._already(form.file_path, f"managed form {slug}")

        changes: list[str] = []
        if self.options.dry_run:
            changes.append(f"{DRY_RUN} Would create managed form: {slug}")
            changes.append(f"{DRY_RUN} Would create backup of original file")
            changes.append(f"{DRY_RUN} Would replace form with Site-Kit managed form")
            return MigrationResult(form.file_path, True, changes)

        payload = build_form_payload(form, slug, self.options.project_id)
        response = await self._register(
            lambda registry: registry.create_form(payload),
            f"Created managed form: {slug}",
            f"Form may already exist: {slug}",
            changes,
        )

        backup = self._path(form.file_path + ".backup")
        if backup.exists():
            # Never clobber the first backup with an already rewritten file
            changes.append(f"Kept existing backup: {form.file_path}.backup")
        else:
            self._write(form.file_path + ".backup", content)
            changes.append(f"Created backup: {form.file_path}.backup")

        self._write(form.file_path, generate_form_code(form, slug, is_typescript(form.file_path)))
        changes.append("Replaced component with Site-Kit managed form")
        changes.append("Original saved to .backup file - delete when satisfied")

        return MigrationResult(
            form.file_path, True, changes,
            form_id=response.entity_id if response is not None else None,
        )
