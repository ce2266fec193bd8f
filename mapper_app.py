"""
STOCK INDUSTRY MAPPER
=====================
Browser tool that maps ticker symbols to industries:
- Industry dataset stats and browser
- Bulk symbol mapping with TradingView / flat exports
- Symbol autocomplete
- Persistent watchlist

API Endpoints:
    GET    /                                  - Dashboard
    GET    /api/init                          - Initialize mapper, page state
    GET    /api/stats                         - Dataset statistics
    GET    /api/industries                    - All industries
    GET    /api/industries/<industry>/symbols - Symbols in one industry
    GET    /api/symbols?q=                    - Autocomplete suggestions
    POST   /api/process                       - Map a list of symbols
    GET    /api/layout?width=                 - Visible sections for a viewport
    GET    /api/watchlist                     - Watchlist grouped by industry
    POST   /api/watchlist                     - Add symbols to watchlist
    DELETE /api/watchlist/<symbol>            - Remove one symbol
    DELETE /api/watchlist                     - Clear watchlist
    GET    /api/export?format=tv|flat|xlsx    - Download last results

Each browser session gets its own page state (results, toasts); the
industry mapper and the watchlist are shared.
"""

import io
import os
import uuid
import logging
import threading
from collections import OrderedDict
from pathlib import Path

from flask import Flask, render_template_string, jsonify, request, send_file, session
import pandas as pd

from industry_mapper import get_industry_mapper
from notifications import ToastQueue
from page_state import HomePage, INIT_TIMEOUT_SECONDS
from symbol_input import MAX_SYMBOLS, MAX_SUGGESTIONS, filter_symbols
from watchlist_store import get_watchlist_store

# ==================== CONFIGURATION ====================
BASE_PATH = Path(__file__).parent

# Detect serverless environment (Vercel)
IS_SERVERLESS = os.environ.get('VERCEL', '') == '1'

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(message)s')
logger = logging.getLogger(__name__)

EXPORT_FORMATS = {
    'tv': ('tradingview_watchlist.txt', 'text/plain'),
    'flat': ('symbols.txt', 'text/plain'),
    'xlsx': ('industry_mapping.xlsx', 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'),
}


# ==============================================================================
# FLASK APPLICATION
# ==============================================================================
app = Flask(__name__)
app.secret_key = os.environ.get('SECRET_KEY') or os.urandom(24)

# Page state per browser session, sharing the one industry mapper
MAX_PAGES = int(os.environ.get('MAX_PAGES', 500))
_pages = OrderedDict()
_pages_lock = threading.Lock()


def create_page() -> HomePage:
    return HomePage(
        mapper_factory=get_industry_mapper,
        watchlist=get_watchlist_store(),
        toasts=ToastQueue(),
        init_timeout=float(os.environ.get('INIT_TIMEOUT_SECONDS', INIT_TIMEOUT_SECONDS)),
    )


def get_page() -> HomePage:
    """Page state of the calling browser, created on its first request."""
    page_id = session.get('page_id')
    if page_id is None:
        page_id = uuid.uuid4().hex
        session['page_id'] = page_id

    with _pages_lock:
        page = _pages.get(page_id)
        if page is None:
            page = create_page()
            _pages[page_id] = page
            # Oldest sessions go first
            while len(_pages) > MAX_PAGES:
                _pages.popitem(last=False)
        else:
            _pages.move_to_end(page_id)
    return page


def get_ready_page():
    """Page with an initialized mapper, or None."""
    page = get_page()
    page.initialize()
    return page if page.mapper is not None else None


def _mapper_unavailable():
    return jsonify({
        'error': 'Industry data is not available. Please refresh the page.',
        'toasts': get_page().toasts.drain()
    }), 503


# ==================== DATA HELPERS ====================
def build_export_frame(stocks):
    """Results as a DataFrame with readable column names."""
    df = pd.DataFrame(stocks)
    if df.empty:
        return df
    df = df.where(df.notna(), None)
    return df.rename(columns={
        'symbol': 'Symbol', 'name': 'Name', 'exchange': 'Exchange',
        'sector': 'Sector', 'industry': 'Industry', 'market_cap': 'Market Cap',
        'pe_ratio': 'PE Ratio', 'eps': 'EPS', 'dividend_yield': 'Dividend Yield',
    })


def build_excel_export(stocks, invalid_symbols) -> io.BytesIO:
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        build_export_frame(stocks).to_excel(writer, sheet_name='Mapped Symbols', index=False)
        pd.DataFrame({'Symbol': invalid_symbols}).to_excel(writer, sheet_name='Invalid Symbols', index=False)
    output.seek(0)
    return output


def group_by_industry(stocks):
    groups = {}
    for stock in stocks:
        groups.setdefault(stock['industry'], []).append(stock['symbol'])
    return [{'industry': industry, 'symbols': symbols} for industry, symbols in groups.items()]


# ==================== ROUTES ====================
@app.route('/')
def dashboard():
    """Main dashboard. Data is loaded by the page through /api/init."""
    return render_template_string(
        HTML_TEMPLATE,
        init_timeout_ms=int(get_page().init_timeout * 1000),
        max_symbols=MAX_SYMBOLS,
        max_suggestions=MAX_SUGGESTIONS,
    )


@app.route('/api/init')
def api_init():
    """
    Initialize the mapper and return the page state.
    Repeat calls reuse a finished mapper and retry one that failed to load.
    """
    page = get_page()
    page.initialize()

    return jsonify({
        **page.snapshot(),
        'toasts': page.toasts.drain()
    })


@app.route('/api/stats')
def api_stats():
    page = get_ready_page()
    if page is None:
        return _mapper_unavailable()
    return jsonify(page.mapper.get_stats())


@app.route('/api/industries')
def api_industries():
    page = get_ready_page()
    if page is None:
        return _mapper_unavailable()

    industries = page.mapper.get_available_industries()
    return jsonify({'total': len(industries), 'industries': industries})


@app.route('/api/industries/<path:industry>/symbols')
def api_industry_symbols(industry):
    page = get_ready_page()
    if page is None:
        return _mapper_unavailable()

    symbols = page.mapper.get_symbols_by_industry(industry)
    if not symbols:
        return jsonify({'error': f'Unknown industry: {industry}'}), 404
    return jsonify({'industry': industry, 'total': len(symbols), 'symbols': symbols})


@app.route('/api/symbols')
def api_symbols():
    """Autocomplete suggestions."""
    page = get_ready_page()
    if page is None:
        return _mapper_unavailable()

    query = request.args.get('q', '')
    return jsonify({'query': query, 'suggestions': filter_symbols(page.available_symbols, query)})


@app.route('/api/process', methods=['POST'])
def api_process():
    """Map a pasted list of symbols."""
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return jsonify({'error': 'No data provided'}), 400

    symbols = data.get('symbols', '')
    if isinstance(symbols, list):
        symbols = ','.join(str(s) for s in symbols)
    elif not isinstance(symbols, str):
        return jsonify({'error': "'symbols' must be a string or a list of strings"}), 400

    page = get_ready_page()
    if page is None:
        return _mapper_unavailable()
    if page.is_loading:
        return jsonify({'error': 'Symbols are already being processed'}), 409

    ok = page.handle_submit(symbols, bool(data.get('show_fundamentals', False)))
    toasts = page.toasts.drain()

    if not ok:
        message = toasts[-1]['message'] if toasts else 'Error processing symbols. Please try again.'
        return jsonify({'error': message, 'toasts': toasts}), 400

    return jsonify({
        'mapped_symbols': page.mapped_symbols,
        'invalid_symbols': page.invalid_symbols,
        'tv_formatted_output': page.tv_formatted_output,
        'flat_output': page.flat_output,
        'show_fundamentals': page.show_fundamentals,
        'toasts': toasts
    })


@app.route('/api/layout')
def api_layout():
    """Sections the page shows at a given viewport width."""
    width = request.args.get('width', 1280, type=int)
    return jsonify(get_page().layout(width))


@app.route('/api/watchlist', methods=['GET'])
def api_watchlist():
    page = get_page()
    symbols = page.watchlist.watchlist

    groups = []
    if page.mapper is not None and symbols:
        result = page.mapper.process_symbols(symbols)
        groups = group_by_industry(result['mapped_symbols'])

    return jsonify({'total': len(symbols), 'watchlist': symbols, 'industries': groups})


@app.route('/api/watchlist', methods=['POST'])
def api_watchlist_add():
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data.get('symbols'):
        return jsonify({'error': 'No symbols provided'}), 400

    symbols = data['symbols']
    if isinstance(symbols, str):
        symbols = [symbols]
    elif not isinstance(symbols, list):
        return jsonify({'error': "'symbols' must be a string or a list of strings"}), 400

    page = get_page()
    added = page.add_to_watchlist(symbols)

    return jsonify({
        'added': added,
        'watchlist': page.watchlist.watchlist,
        'toasts': page.toasts.drain()
    }), 201


@app.route('/api/watchlist/<symbol>', methods=['DELETE'])
def api_watchlist_remove(symbol):
    page = get_page()
    if not page.watchlist.remove_from_watchlist(symbol):
        return jsonify({'error': f'{symbol.upper()} is not in the watchlist'}), 404
    return jsonify({'watchlist': page.watchlist.watchlist})


@app.route('/api/watchlist', methods=['DELETE'])
def api_watchlist_clear():
    page = get_page()
    page.watchlist.clear_watchlist()
    return jsonify({'watchlist': []})


@app.route('/api/export')
def api_export():
    """Download the last results."""
    page = get_page()
    export_format = request.args.get('format', 'tv').lower()

    if export_format not in EXPORT_FORMATS:
        return jsonify({'error': f'Unknown export format: {export_format}'}), 400
    if not page.mapped_symbols:
        return jsonify({'error': 'No data to export'}), 404

    filename, mimetype = EXPORT_FORMATS[export_format]
    if export_format == 'xlsx':
        payload = build_excel_export(page.mapped_symbols, page.invalid_symbols)
    else:
        text = page.tv_formatted_output if export_format == 'tv' else page.flat_output
        payload = io.BytesIO(text.encode('utf-8'))

    return send_file(payload, mimetype=mimetype, as_attachment=True, download_name=filename)


@app.route('/health')
def health():
    """Health check endpoint."""
    page = get_page()
    return jsonify({
        'status': 'healthy',
        'data_loaded': page.mapper is not None,
        'initializing': page.is_initializing,
        'watchlist_size': len(page.watchlist.watchlist),
        'serverless': IS_SERVERLESS
    })


HTML_TEMPLATE = '''<!DOCTYPE html>
<html class="dark" lang="en"><head>
<meta charset="utf-8"/>
<meta content="width=device-width, initial-scale=1.0" name="viewport"/>
<title>Stock Industry Mapper</title>
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@300;400;500;600;700&family=JetBrains+Mono:wght@400;500&display=swap" rel="stylesheet"/>
<script src="https://cdn.tailwindcss.com?plugins=forms"></script>
<script>
tailwind.config = {
    darkMode: "class",
    theme: {
        extend: {
            fontFamily: { sans: ["Inter", "sans-serif"], mono: ["JetBrains Mono", "monospace"] },
            colors: {
                background: { dark: "#0f172a" },
                surface: { dark: "#1e293b", darker: "#0b1120" },
                primary: "#3b82f6",
            },
        },
    },
};
</script>
<style>
* { transition-duration: 80ms; }
::-webkit-scrollbar { width: 6px; height: 6px; }
::-webkit-scrollbar-thumb { background: #334155; border-radius: 4px; }
.symbol-dropdown-portal { position: absolute; z-index: 100; max-height: 250px; overflow-y: auto; }
</style>
</head>
<body class="bg-background-dark text-slate-200 font-sans min-h-screen flex flex-col">

<header class="sticky top-0 z-50 bg-surface-darker/90 backdrop-blur-md border-b border-slate-800">
<div class="max-w-[1400px] mx-auto px-4 h-16 flex items-center justify-between">
<div>
<h1 class="text-xl font-bold tracking-tight text-white leading-none">Stock Industry Mapper</h1>
<p class="text-xs text-slate-400 mt-1">Map symbols to industries • Export to TradingView</p>
</div>
</div>
</header>

<div id="toasts" class="fixed top-4 right-4 z-[200] space-y-2 w-80"></div>

<main class="flex-1 max-w-[1400px] w-full mx-auto py-4 px-3 sm:px-4 sm:py-6">

<div id="loading" class="flex items-center justify-center h-[80vh]">
<div class="flex flex-col items-center">
<div class="animate-spin h-12 w-12 rounded-full border-t-2 border-b-2 border-primary"></div>
<p class="mt-4 text-slate-400">Loading data...</p>
</div>
</div>

<div id="content" class="hidden grid grid-cols-1 md:grid-cols-3 gap-4 md:gap-6">
<div class="md:col-span-2 space-y-4">
<button id="show-instructions" class="w-full md:w-auto text-sm px-3 py-1.5 border border-slate-700 rounded-md text-slate-400 hover:text-white">Show Instructions</button>
<section id="instructions" class="hidden relative bg-surface-dark p-4 rounded-xl border border-slate-700/50">
<button id="hide-instructions" class="absolute top-2 right-2 text-xs px-2 py-1 border border-slate-700 rounded-md">Hide Instructions</button>
<h2 class="font-semibold text-white mb-2">How to use</h2>
<ol class="list-decimal list-inside text-sm text-slate-400 space-y-1">
<li>Paste symbols separated by commas or new lines (up to {{ max_symbols }}).</li>
<li>Or search a symbol below and press + to add it.</li>
<li>Press Map Symbols to group them by industry.</li>
<li>Copy the TradingView output into a watchlist import, or add the results to your watchlist.</li>
</ol>
</section>

<section id="stats-mobile" class="md:hidden"></section>

<section class="bg-surface-dark p-4 rounded-xl border border-slate-700/50 space-y-3">
<h2 class="font-semibold text-white">Symbols</h2>
<div id="autocomplete" class="relative w-full">
<div class="flex w-full space-x-2">
<input id="symbol-search" type="text" placeholder="Type to search symbols..." autocomplete="off"
 class="w-full text-sm h-9 bg-background-dark text-white border border-slate-700 rounded-md"/>
<button id="symbol-add" type="button" disabled class="h-9 w-9 border border-slate-700 rounded-md disabled:opacity-40">+</button>
</div>
</div>
<textarea id="symbols" rows="6" placeholder="AAPL, MSFT, NVDA" class="w-full font-mono text-sm bg-background-dark text-white border border-slate-700 rounded-md"></textarea>
<div class="flex items-center justify-between">
<label class="text-sm text-slate-400"><input id="fundamentals" type="checkbox" class="mr-2 rounded"/>Show fundamentals</label>
<button id="submit" class="px-4 py-2 bg-primary text-white rounded-md text-sm font-medium disabled:opacity-50">Map Symbols</button>
</div>
</section>

<section id="results" class="hidden bg-surface-dark p-4 rounded-xl border border-slate-700/50 space-y-3"></section>
<section id="industries-mobile" class="md:hidden"></section>
<section id="watchlist-mobile" class="md:hidden"></section>
</div>

<div class="hidden md:block space-y-4">
<section id="stats-desktop"></section>
<section id="watchlist-desktop"></section>
<section id="industries-desktop"></section>
</div>
</div>
</main>

<footer class="border-t border-slate-800 py-4 text-center text-xs text-slate-500">Industry classifications are informational only.</footer>

<script>
const INIT_TIMEOUT_MS = {{ init_timeout_ms }};
const MAX_SYMBOLS = {{ max_symbols }};
const MAX_SUGGESTIONS = {{ max_suggestions }};
let state = { available_symbols: [], industries: [], stats: null, watchlist: [] };

function toast(t) {
    const el = document.createElement('div');
    const color = t.kind === 'error' ? 'border-red-500/40 text-red-300' : 'border-emerald-500/40 text-emerald-300';
    el.className = 'bg-surface-dark border rounded-md px-4 py-3 text-sm shadow-xl ' + color;
    el.textContent = t.message;
    document.getElementById('toasts').appendChild(el);
    setTimeout(() => el.remove(), t.duration || 2000);
}
function showToasts(list) { (list || []).forEach(toast); }

function parseSymbols(text) {
    return text.replace(/\\n/g, ',').split(',').map(s => s.trim()).filter(s => s);
}

function esc(v) {
    return String(v).replace(/&/g, '&amp;').replace(/</g, '&lt;').replace(/>/g, '&gt;')
        .replace(/"/g, '&quot;').replace(/'/g, '&#39;');
}

function renderStats() {
    if (!state.stats) return;
    const s = state.stats;
    const html = `<div class="bg-surface-dark p-4 rounded-xl border border-slate-700/50 grid grid-cols-3 gap-2 text-center">
        <div><div class="text-xs text-slate-400 uppercase">Symbols</div><div class="text-xl font-bold text-white">${s.total_symbols}</div></div>
        <div><div class="text-xs text-slate-400 uppercase">Industries</div><div class="text-xl font-bold text-white">${s.total_industries}</div></div>
        <div><div class="text-xs text-slate-400 uppercase">Sectors</div><div class="text-xl font-bold text-white">${s.total_sectors}</div></div>
    </div>`;
    document.getElementById('stats-mobile').innerHTML = html;
    document.getElementById('stats-desktop').innerHTML = html;
}

function renderIndustries() {
    if (!state.industries.length) return;
    const items = state.industries.map(i =>
        `<li><button class="industry w-full text-left px-2 py-1 text-sm hover:bg-slate-700/50 rounded" data-industry="${esc(i)}">${esc(i)}</button></li>`).join('');
    const html = `<div class="bg-surface-dark p-4 rounded-xl border border-slate-700/50">
        <h2 class="font-semibold text-white mb-2">Available Industries (${state.industries.length})</h2>
        <ul class="max-h-[300px] overflow-y-auto">${items}</ul></div>`;
    document.getElementById('industries-mobile').innerHTML = html;
    document.getElementById('industries-desktop').innerHTML = html;
    document.querySelectorAll('.industry').forEach(b => b.addEventListener('click', async () => {
        const res = await fetch('/api/industries/' + encodeURIComponent(b.dataset.industry) + '/symbols');
        const data = await res.json();
        if (!res.ok) { toast({kind: 'error', message: data.error}); return; }
        document.getElementById('symbols').value = data.symbols.join(', ');
    }));
}

async function renderWatchlist() {
    const res = await fetch('/api/watchlist');
    const data = await res.json();
    state.watchlist = data.watchlist;
    let html = '';
    if (data.total > 0) {
        const groups = data.industries.map(g =>
            `<div class="mb-2"><div class="text-xs text-slate-400">${esc(g.industry)}</div><div class="font-mono text-sm">${esc(g.symbols.join(', '))}</div></div>`).join('');
        html = `<div class="bg-surface-dark p-4 rounded-xl border border-slate-700/50">
            <div class="flex justify-between mb-2"><h2 class="font-semibold text-white">Watchlist (${data.total})</h2>
            <button id="watchlist-clear" class="text-xs text-slate-400 hover:text-white">Clear</button></div>${groups}</div>`;
    }
    document.getElementById('watchlist-mobile').innerHTML = html;
    document.getElementById('watchlist-desktop').innerHTML = html;
    const clear = document.getElementById('watchlist-clear');
    if (clear) clear.addEventListener('click', async () => {
        await fetch('/api/watchlist', {method: 'DELETE'});
        renderWatchlist();
    });
}

function fmt(v) { return v === null || v === undefined ? '—' : esc(v); }

function renderResults(r) {
    const el = document.getElementById('results');
    if (!r.mapped_symbols.length) { el.classList.add('hidden'); return; }
    const extra = r.show_fundamentals ? '<th>Mkt Cap ($B)</th><th>P/E</th><th>EPS</th><th>Div %</th>' : '';
    const rows = r.mapped_symbols.map(s => `<tr class="border-t border-slate-700/50">
        <td class="font-mono py-1">${esc(s.symbol)}</td><td>${esc(s.name)}</td><td>${esc(s.industry)}</td>
        ${r.show_fundamentals ? `<td>${fmt(s.market_cap)}</td><td>${fmt(s.pe_ratio)}</td><td>${fmt(s.eps)}</td><td>${fmt(s.dividend_yield)}</td>` : ''}
    </tr>`).join('');
    const invalid = r.invalid_symbols.length
        ? `<p class="text-sm text-red-300">Invalid: ${esc(r.invalid_symbols.join(', '))}</p>` : '';
    el.innerHTML = `<div class="flex justify-between items-center"><h2 class="font-semibold text-white">Results (${r.mapped_symbols.length})</h2>
        <button id="add-watchlist" class="text-sm px-3 py-1.5 border border-slate-700 rounded-md">Add to Watchlist</button></div>
        ${invalid}
        <div class="overflow-x-auto"><table class="w-full text-sm text-left"><thead class="text-xs text-slate-400 uppercase">
        <tr><th>Symbol</th><th>Name</th><th>Industry</th>${extra}</tr></thead><tbody>${rows}</tbody></table></div>
        <label class="block text-xs text-slate-400 uppercase">TradingView</label>
        <textarea readonly rows="3" class="w-full font-mono text-xs bg-background-dark border border-slate-700 rounded-md">${esc(r.tv_formatted_output)}</textarea>
        <label class="block text-xs text-slate-400 uppercase">Flat</label>
        <textarea readonly rows="2" class="w-full font-mono text-xs bg-background-dark border border-slate-700 rounded-md">${esc(r.flat_output)}</textarea>
        <div class="flex gap-2 text-sm"><a class="underline" href="/api/export?format=tv">Download TradingView</a>
        <a class="underline" href="/api/export?format=flat">Download flat</a><a class="underline" href="/api/export?format=xlsx">Download Excel</a></div>`;
    el.classList.remove('hidden');
    document.getElementById('add-watchlist').addEventListener('click', async () => {
        const res = await fetch('/api/watchlist', {method: 'POST', headers: {'Content-Type': 'application/json'},
            body: JSON.stringify({symbols: r.mapped_symbols.map(s => s.symbol)})});
        const data = await res.json();
        showToasts(data.toasts);
        renderWatchlist();
    });
}

async function submitSymbols() {
    const text = document.getElementById('symbols').value;
    const symbols = parseSymbols(text);
    if (symbols.length > MAX_SYMBOLS) {
        toast({kind: 'error', message: `Too many symbols. Maximum limit is ${MAX_SYMBOLS} symbols at once.`, duration: 5000});
        return;
    }
    if (symbols.length === 0) {
        toast({kind: 'error', message: 'Please enter at least one valid symbol'});
        return;
    }
    const button = document.getElementById('submit');
    button.disabled = true;
    button.textContent = 'Processing...';
    try {
        const res = await fetch('/api/process', {method: 'POST', headers: {'Content-Type': 'application/json'},
            body: JSON.stringify({symbols: text, show_fundamentals: document.getElementById('fundamentals').checked})});
        const data = await res.json();
        showToasts(data.toasts);
        if (res.ok) renderResults(data);
        else if (!data.toasts) toast({kind: 'error', message: data.error});
    } catch (e) {
        toast({kind: 'error', message: 'Error processing symbols. Please try again.', duration: 5000});
    } finally {
        button.disabled = false;
        button.textContent = 'Map Symbols';
    }
}

// Autocomplete with a dropdown attached to <body>
const search = document.getElementById('symbol-search');
const addButton = document.getElementById('symbol-add');
const wrapper = document.getElementById('autocomplete');
let dropdown = null;
let filtered = [];

function closeDropdown() { if (dropdown) { dropdown.remove(); dropdown = null; } }

function openDropdown() {
    closeDropdown();
    if (!filtered.length) return;
    const rect = search.getBoundingClientRect();
    dropdown = document.createElement('div');
    dropdown.className = 'symbol-dropdown-portal bg-surface-dark border border-slate-700 rounded-md shadow-xl';
    dropdown.style.top = (rect.bottom + window.scrollY) + 'px';
    dropdown.style.left = (rect.left + window.scrollX) + 'px';
    dropdown.style.width = rect.width + 'px';
    dropdown.innerHTML = '<ul class="py-1">' + filtered.map(s =>
        `<li><button type="button" class="w-full text-left px-3 py-2 text-sm hover:bg-slate-700" data-symbol="${esc(s)}">${esc(s)}</button></li>`).join('') + '</ul>';
    dropdown.querySelectorAll('button').forEach(b => b.addEventListener('click', e => {
        e.preventDefault();
        e.stopPropagation();
        selectSymbol(b.dataset.symbol);
    }));
    document.body.appendChild(dropdown);
}

function selectSymbol(symbol) {
    const box = document.getElementById('symbols');
    const current = parseSymbols(box.value);
    current.push(symbol);
    box.value = current.join(', ');
    search.value = '';
    filtered = [];
    addButton.disabled = true;
    closeDropdown();
}

search.addEventListener('input', () => {
    const q = search.value;
    addButton.disabled = q.length === 0;
    const chosen = new Set(parseSymbols(document.getElementById('symbols').value).map(s => s.toUpperCase()));
    filtered = q.length < 1 ? [] : state.available_symbols.filter(s => s.includes(q.toUpperCase()) && !chosen.has(s)).slice(0, MAX_SUGGESTIONS);
    if (filtered.length) openDropdown(); else closeDropdown();
});
search.addEventListener('focus', () => { if (filtered.length) openDropdown(); });
addButton.addEventListener('click', () => { if (search.value) selectSymbol(search.value.toUpperCase()); });
document.addEventListener('mousedown', e => {
    if (wrapper.contains(e.target)) return;
    if (dropdown && dropdown.contains(e.target)) return;
    closeDropdown();
});

document.getElementById('submit').addEventListener('click', submitSymbols);
document.getElementById('show-instructions').addEventListener('click', () => {
    document.getElementById('instructions').classList.remove('hidden');
    document.getElementById('show-instructions').classList.add('hidden');
});
document.getElementById('hide-instructions').addEventListener('click', () => {
    document.getElementById('instructions').classList.add('hidden');
    document.getElementById('show-instructions').classList.remove('hidden');
});

function finishLoading() {
    document.getElementById('loading').classList.add('hidden');
    document.getElementById('content').classList.remove('hidden');
}

async function init() {
    const controller = new AbortController();
    const safety = setTimeout(() => {
        controller.abort();
        finishLoading();
        toast({kind: 'error', message: 'Loading took too long. Please refresh the page.', duration: 5000});
    }, INIT_TIMEOUT_MS + 1000);
    try {
        const res = await fetch('/api/init', {signal: controller.signal});
        const data = await res.json();
        state = {...state, ...data};
        renderStats();
        renderIndustries();
        renderWatchlist();
        showToasts(data.toasts);
        finishLoading();
    } catch (e) {
        if (e.name !== 'AbortError') {
            toast({kind: 'error', message: 'Failed to load data. Please refresh the page.', duration: 5000});
            finishLoading();
        }
    } finally {
        clearTimeout(safety);
    }
}
setTimeout(init, 100);
</script>
</body></html>
'''


if __name__ == "__main__":
    port = int(os.environ.get('PORT', 5001))

    print("\n" + "=" * 60)
    print(" STOCK INDUSTRY MAPPER")
    print("=" * 60)
    print(f" Dashboard: http://localhost:{port}")
    print(" Endpoints:")
    print("   POST /api/process     - Map symbols to industries")
    print("   GET  /api/watchlist   - Show watchlist")
    print("   GET  /api/export      - Download last results")
    print("=" * 60 + "\n")

    app.run(host='0.0.0.0', port=port, debug=True, threaded=True)
