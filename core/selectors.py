selectors = {
    # Employee login page
    "login_username": 'xpath=//input[@placeholder="Enter user name"]',
    "login_password": 'xpath=//input[@placeholder="Enter password"]',
    "login_submit": 'button[type="submit"]',

    # Dashboard
    "products_entry_tile": 'xpath=//p[contains(text(),"Products entry")]/..',

    # Products entry login dialog
    "module_login_username": 'xpath=//input[@placeholder="email or phone number"]',
    "module_login_password": 'xpath=//input[@placeholder="password"]',
    "module_login_submit": 'xpath=//button[normalize-space(text())="Login"]',

    # Materials tab
    "materials_tab": 'xpath=//span[normalize-space(text())="materials"]',
    "add_material_button": 'xpath=//span[normalize-space(text())="add a new ingredient"]/..',

    # Entry form (floating overlay)
    "entry_overlay": "div.floating-form.position-absolute",
    "entry_dismiss_button": "div.floating-form.position-absolute button.btn-close",
    "name_inputs": 'input[id^="input-name-"]',
    "material_form_select": 'select[id^="select-state_of_matter_id-"]',
    "order_limit_input": 'input[id^="input-order_limit-"]',
    "buying_cost_input": 'input[id^="input-buying_cost-"]',
    "unit_selects": 'select[id^="select-unit-"]',
    "select_by_id": 'select[id="{id}"]',
    "option_by_value": 'option[value="{value}"]',
    "toggle_by_label": 'xpath=//div[normalize-space(text())={label}]/preceding-sibling::label[contains(@class,"lbl-on-off")]',
    "create_button": 'xpath=//button[normalize-space(text())="create"]',
}
